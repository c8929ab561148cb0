#!/usr/bin/env python3
"""
Set the role of a studio user, creating the account if needed.

The API never grants ``admin``; the first admin (and any later one)
is created with this script::

    python set_role.py --email owner@studio.example --role admin

Run it with the same ``DATABASE_URL`` as the server.
"""

import argparse
import asyncio
import sys
from typing import Optional

from studio_api.app.core.db import init_db
from studio_api.app.core.exceptions import ValidationError
from studio_api.app.core.policy import ROLES
from studio_api.app.services.user_service import UserService


async def set_role(email: str, role: str, name: Optional[str] = None) -> str:
    user = await UserService.get_user_by_email(email)
    if user is None:
        user = await UserService.create_user(email=email, name=name, role=role)
        return f"[+] Created {role} account {user.id} for {email}"
    if user.role == role:
        return f"[=] {email} already has role {role}"
    user = await UserService.set_role(user.id, role)
    return f"[+] {email} is now {user.role}"


def main() -> None:
    ap = argparse.ArgumentParser(description="Set a studio user's role.")
    ap.add_argument("--email", required=True, help="User email")
    ap.add_argument("--role", required=True, choices=ROLES, help="Role to give the user")
    ap.add_argument("--name", help="Display name, used when the account is created")
    args = ap.parse_args()

    init_db()
    try:
        print(asyncio.run(set_role(args.email, args.role, args.name)))
    except ValidationError as e:
        print(f"[!] {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
