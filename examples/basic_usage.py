"""
Example: Basic usage of spclient
================================

Log in, browse a document library, move files, and save the session so
later runs can skip the login.
"""

from pathlib import Path

from spclient import SharePointClient

SITE_URL = "https://contoso.sharepoint.com"
AUTH_FILE = Path("sharepoint_auth.bin")


def example_login_and_list():
    """Log in with SHAREPOINT_USERNAME / SHAREPOINT_PASS and list a folder."""
    with SharePointClient(SITE_URL) as client:
        docs = client.folder("team", "Shared Documents", verify=True)
        for item in docs.list():
            kind = "dir " if item.is_folder else "file"
            print(kind, item.name, item.size or "", item.modified)

        # Keep the session for later
        client.get_auth_data(AUTH_FILE)


def example_restore_and_transfer():
    """Reuse a saved session to upload and download."""
    with SharePointClient(SITE_URL, auth=AUTH_FILE) as client:
        docs = client.folder("team", "Shared Documents")
        reports = docs.create("Reports")
        reports.upload("q3.xlsx")
        path = reports.download("q3.xlsx", "q3-copy.xlsx", overwrite=True)
        print(f"Downloaded to {path}")


def example_raw_requests():
    """The underlying router for endpoints without a wrapper."""
    with SharePointClient(SITE_URL, auth=AUTH_FILE) as client:
        r = client.get("/sites/team/_api/web/lists")
        client.session.raise_for_error(r)
        print([lst["Title"] for lst in r.json()["value"]])

        # Writes pass the site so a request digest is attached
        r = client.post(
            "/sites/team/_api/web/lists/getbytitle('Tasks')/items",
            site="team",
            json={"Title": "Review"},
        )
        client.session.raise_for_error(r)


if __name__ == "__main__":
    # Uncomment the example you want to run
    # example_login_and_list()
    # example_restore_and_transfer()
    # example_raw_requests()

    print("Set up your environment variables and uncomment an example to run.")
    print("Required: SHAREPOINT_USERNAME, SHAREPOINT_PASS")
