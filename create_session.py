#!/usr/bin/env python3
"""
Print a session token for an existing user.

Handy for calling the API with curl or from scripts without going
through the identity provider::

    python create_session.py --email admin@studio.example --days 365
    curl -H "Authorization: Bearer <token>" http://localhost:8000/api/auth/session

The token is signed with ``SECRET_KEY``, so run this with the same
environment as the server.
"""

import argparse
import asyncio
import sys

from studio_api.app.core.db import init_db
from studio_api.app.core.security import create_session_token
from studio_api.app.services.user_service import UserService


def main() -> None:
    ap = argparse.ArgumentParser(description="Mint a studio API session token.")
    ap.add_argument("--email", required=True, help="Email of the user the token is for")
    ap.add_argument("--days", type=int, default=30, help="Token lifetime in days (default 30)")
    args = ap.parse_args()

    init_db()
    user = asyncio.run(UserService.get_user_by_email(args.email))
    if user is None:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        sys.exit(2)

    token = create_session_token({"sub": user.id, "role": user.role}, expires_delta=args.days * 24 * 60 * 60)
    print(token)


if __name__ == "__main__":
    main()
