#!/usr/bin/env python3
"""
One-time OAuth2 authorization for the Gmail email provider.

Run this on a machine with a browser; it opens the Google consent screen and
stores a refresh token next to the client credentials. Point
GMAIL_CREDENTIALS_PATH / GMAIL_TOKEN_PATH at the same files when EMAIL_PROVIDER=gmail.

Usage:
    python scripts/gmail_auth.py [credentials.json] [token.json]
"""

import json
import sys
from pathlib import Path

from google_auth_oauthlib.flow import InstalledAppFlow

from tallyrelay.providers.gmail import SCOPES

DEFAULT_DIR = Path(__file__).parent.parent / "config" / "gmail"


def main(argv: list[str]) -> int:
    credentials_path = Path(argv[1]) if len(argv) > 1 else DEFAULT_DIR / "credentials.json"
    token_path = Path(argv[2]) if len(argv) > 2 else DEFAULT_DIR / "token.json"

    if not credentials_path.exists():
        print(f"ERROR: {credentials_path} not found.")
        print()
        print("To set up Gmail API credentials:")
        print("  1. Go to https://console.cloud.google.com/apis/credentials")
        print("  2. Create an OAuth 2.0 Client ID (Desktop app)")
        print(f"  3. Download the JSON and save it as {credentials_path}")
        return 1

    print("Starting OAuth2 authorization flow...")
    print("A browser window will open. Sign in and grant access.\n")

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
    creds = flow.run_local_server(port=8090, open_browser=True)

    token_data = {
        "token": creds.token,
        "refresh_token": creds.refresh_token,
        "token_uri": creds.token_uri,
        "client_id": creds.client_id,
        "client_secret": creds.client_secret,
        "scopes": list(creds.scopes),
    }

    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(json.dumps(token_data, indent=2))
    print(f"\nToken saved to {token_path}")
    print("TallyRelay will use this token when EMAIL_PROVIDER=gmail.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
