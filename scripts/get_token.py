#!/usr/bin/env python3
"""
Gmail Refresh Token Generator

Run this script once to get a refresh token that can send alert emails
(gmail.send scope).

Usage:
    python scripts/get_token.py

Follow the prompts:
1. Click the generated URL
2. Authorize on Google
3. Copy the 'code' parameter from the redirect URL
4. Paste it into the terminal
5. Copy the refresh token to your .env file
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path so we can import from app
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from app.auth.google import GMAIL_SEND_SCOPES, GoogleOAuth  # noqa: E402


def _extract_code(user_input: str) -> str:
    if "code=" in user_input:
        return user_input.split("code=")[1].split("&")[0]
    return user_input


async def main():
    print("=" * 60)
    print("Gmail Refresh Token Generator")
    print("=" * 60)
    print()
    print("This will generate a refresh token with the following scopes:")
    for scope in GMAIL_SEND_SCOPES:
        print(f"  - {scope}")
    print()

    oauth = GoogleOAuth(scopes=GMAIL_SEND_SCOPES)
    auth_url = oauth.get_auth_url(state="token-generator")

    print("Step 1: Visit this URL in your browser:")
    print()
    print(auth_url)
    print()
    print(f"Step 2: After authorizing, Google redirects to {oauth.redirect_uri}")
    print("Copy the ENTIRE redirect URL, or just the 'code' value.")
    print()

    code = _extract_code(input("Paste here: ").strip())

    print()
    print("Exchanging code for tokens...")

    try:
        token_data = await oauth.exchange_code(code)
    except Exception as e:
        print()
        print("ERROR:", str(e))
        print()
        print("Make sure you:")
        print("  1. Copied the entire code value")
        print("  2. Have GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET in .env")
        print("  3. Registered the redirect URI in Google Cloud Console")
        sys.exit(1)

    print()
    print("=" * 60)
    print("SUCCESS! Here's your refresh token:")
    print("=" * 60)
    print()
    print(token_data.refresh_token)
    print()
    print("Add it to your .env file:")
    print("  GOOGLE_REFRESH_TOKEN=<paste-token-here>")
    print()


if __name__ == "__main__":
    asyncio.run(main())
