"""
Tests for spclient.core plumbing: credentials, config, outcomes, session
state and request routing.
"""

import pytest
from unittest.mock import Mock, patch

from spclient.core.credentials import Credentials
from spclient.core.errors import (
    AuthRequestError,
    DigestError,
    SessionCookieError,
    SharePointError,
    SharePointUpstreamError,
    TokenNotFoundError,
)
from spclient.core.result import Outcome
from spclient.core.session import SessionState, SharePointConfig, SharePointSession


class TestCredentials:
    """Tests for Credentials."""

    def test_reads_from_environment(self, sharepoint_env):
        creds = Credentials.from_env()
        assert creds.username == "user"
        assert creds.password == "pass"

    def test_missing_variable_raises(self, monkeypatch):
        monkeypatch.setenv("SHAREPOINT_USERNAME", "user")
        monkeypatch.delenv("SHAREPOINT_PASS", raising=False)
        with pytest.raises(ValueError, match="Missing credentials"):
            Credentials.from_env()

    def test_repr_hides_password(self):
        creds = Credentials("user", "s3cret")
        assert "s3cret" not in repr(creds)
        assert "user" in repr(creds)

    def test_reads_dotenv_file(self, tmp_path, monkeypatch):
        # set first so monkeypatch removes what load_dotenv writes
        for name in ("SHAREPOINT_USERNAME", "SHAREPOINT_PASS"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        env = tmp_path / ".env"
        env.write_text("SHAREPOINT_USERNAME=dotuser\nSHAREPOINT_PASS=dotpass\n")

        creds = Credentials.from_env(env)

        assert creds.username == "dotuser"
        assert creds.password == "dotpass"


class TestSharePointConfig:
    """Tests for SharePointConfig dataclass."""

    def test_default_values(self):
        cfg = SharePointConfig(base_url="https://example.com")
        assert cfg.timeout is None
        assert cfg.verify is True
        assert cfg.digest_ttl is None
        assert cfg.federation_url == "https://login.microsoftonline.com/extSTS.srf"


class TestOutcome:
    """Tests for Outcome."""

    def test_success(self):
        outcome = Outcome.success("token")
        assert outcome.ok
        assert outcome.unwrap() == "token"

    def test_failure_unwrap_raises_stored_error(self):
        err = TokenNotFoundError("user")
        outcome = Outcome.failure(err)
        assert not outcome.ok
        assert outcome.error is err
        with pytest.raises(TokenNotFoundError):
            outcome.unwrap()


class TestErrors:
    """Tests for the error taxonomy."""

    def test_all_errors_share_base(self):
        for err in (
            AuthRequestError("user"),
            TokenNotFoundError("user"),
            SessionCookieError("https://example.com", []),
            DigestError("team", "boom"),
            SharePointUpstreamError(500, "", "https://example.com"),
        ):
            assert isinstance(err, SharePointError)

    def test_auth_request_error_names_user(self):
        assert str(AuthRequestError("user")) == "Failed to authenticate user 'user'."

    def test_session_cookie_error_lists_received(self):
        err = SessionCookieError("https://httpbin.org/cookies", ["test", "test2"])
        assert err.received == ["test", "test2"]
        assert str(err) == (
            "Failed to retrieve all required cookies from URL 'https://httpbin.org/cookies'.\n"
            "Must provide rtFa and FedAuth cookies, got test, test2"
        )

    def test_upstream_error_message_truncation(self):
        err = SharePointUpstreamError(500, "x" * 2000, "https://example.com")
        assert err.status == 500
        assert len(str(err)) < 1500


class TestSessionState:
    """Tests for SessionState."""

    def test_url_joins_without_double_slash(self):
        state = SessionState("https://example.com/")
        assert state.url("/_api/contextinfo") == "https://example.com/_api/contextinfo"
        assert state.url("_api/contextinfo") == "https://example.com/_api/contextinfo"

    def test_auth_cookies_are_ordered_and_exclusive(self):
        state = SessionState("https://example.com")
        state.install_cookies([("other", "x"), ("FedAuth", "def"), ("rtFa", "abc")])

        assert state.auth_cookies() == [("rtFa", "abc"), ("FedAuth", "def")]
        assert state.missing_cookies() == []

    def test_missing_cookies(self):
        state = SessionState("https://example.com")
        state.install_cookies([("rtFa", "abc")])
        assert state.missing_cookies() == ["FedAuth"]

    def test_cookie_header(self):
        state = SessionState("https://example.com")
        state.install_cookies([("rtFa", "abc"), ("FedAuth", "def")])
        assert state.cookie_header("/_api/web") == "rtFa=abc; FedAuth=def"

    def test_absorb_puts_required_cookies_first(self, make_response):
        state = SessionState("https://example.com")
        r = make_response(cookies=[("FedAuth", "def"), ("extra", "1"), ("rtFa", "abc")])

        state.absorb_response_cookies(r)

        assert state.cookie_header().startswith("rtFa=abc; FedAuth=def")

    def test_absorb_reorders_cookies_already_in_jar(self, make_response):
        state = SessionState("https://example.com")
        # requests fills the session jar in server order before we see the response
        state.install_cookies([("FedAuth", "def"), ("rtFa", "abc")])
        r = make_response(cookies=[("FedAuth", "def"), ("rtFa", "abc")])

        state.absorb_response_cookies(r)

        assert state.cookie_header() == "rtFa=abc; FedAuth=def"
        assert state.cookie_names() == ["rtFa", "FedAuth"]


class TestSharePointSession:
    """Tests for SharePointSession request routing."""

    def test_get_routes_through_shared_session(self, sp_session, mock_send, make_response):
        mock_send.return_value = make_response(json_body={"ok": True})
        sp_session.state.install_cookies([("rtFa", "abc"), ("FedAuth", "def")])

        r = sp_session.get("/sites/team/_api/web")

        assert r.json() == {"ok": True}
        prep = mock_send.call_args.args[0]
        assert prep.method == "GET"
        assert prep.url == "https://example.com/sites/team/_api/web"
        assert prep.headers["Cookie"] == "rtFa=abc; FedAuth=def"
        assert "X-RequestDigest" not in prep.headers

    def test_post_with_site_attaches_digest(self, sp_session, mock_send, make_response, context_info):
        mock_send.side_effect = [
            make_response(json_body=context_info),
            make_response(status=201),
        ]

        sp_session.post("/sites/team/_api/web/folders", site="team", data="{}")

        assert mock_send.call_count == 2
        digest_req = mock_send.call_args_list[0].args[0]
        assert digest_req.method == "POST"
        assert digest_req.url == "https://example.com/sites/team/_api/contextinfo"
        write_req = mock_send.call_args_list[1].args[0]
        assert write_req.headers["X-RequestDigest"] == context_info["FormDigestValue"]

    def test_delete_without_site_skips_digest(self, sp_session, mock_send, make_response):
        mock_send.return_value = make_response(status=200)

        sp_session.delete("/sites/team/_api/web/thing")

        assert mock_send.call_count == 1
        assert mock_send.call_args.args[0].method == "DELETE"

    def test_error_status_is_returned_not_raised(self, sp_session, mock_send, make_response):
        mock_send.return_value = make_response(status=404)
        r = sp_session.get("/missing")
        assert r.status_code == 404

    def test_raise_for_error_extracts_odata_message(self, sp_session, make_response):
        r = make_response(
            status=400,
            json_body={"error": {"code": "-1, Microsoft.SharePoint.Client.InvalidClientQueryException",
                                 "message": {"lang": "en-US", "value": "Bad query"}}},
            url="https://example.com/sites/team/_api/web",
        )
        with pytest.raises(SharePointUpstreamError) as exc:
            sp_session.raise_for_error(r)
        assert exc.value.status == 400
        assert "message=Bad query" in exc.value.body

    def test_raise_for_error_passes_success(self, sp_session, make_response):
        sp_session.raise_for_error(make_response(status=200))

    def test_timeout_passed_to_transport(self, mock_send, make_response):
        mock_send.return_value = make_response()
        sess = SharePointSession(SharePointConfig(base_url="https://example.com", timeout=12.5))

        sess.get("/x")

        assert mock_send.call_args.kwargs["timeout"] == 12.5

    @patch("spclient.core.session.requests.Session")
    def test_context_manager(self, mock_session_class):
        http = Mock()
        mock_session_class.return_value = http

        with SharePointSession(SharePointConfig(base_url="https://example.com")) as sess:
            assert sess.base_url == "https://example.com"

        http.close.assert_called_once()
