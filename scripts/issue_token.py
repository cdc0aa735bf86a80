#!/usr/bin/env python3
"""
Issue a bearer token for local development.

Tokens are normally minted by the identity service. This script signs one
with the configured STOREFRONT_JWT_SECRET so the API can be exercised from
curl or the interactive docs.

Usage:
    python scripts/issue_token.py user-123
    python scripts/issue_token.py admin-1 --admin --hours 8
"""

import argparse
from datetime import datetime, timedelta, timezone

from storefront.security.auth import Role, issue_token


def main():
    parser = argparse.ArgumentParser(description="Issue a storefront bearer token")
    parser.add_argument("user_id", help="Subject of the token")
    parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    parser.add_argument("--hours", type=int, default=24, help="Token lifetime in hours")
    args = parser.parse_args()

    role = Role.ADMIN if args.admin else Role.USER
    expires = datetime.now(timezone.utc) + timedelta(hours=args.hours)
    token = issue_token(args.user_id, role, exp=expires)

    print(f"Role:    {role.value}")
    print(f"Expires: {expires.isoformat()}")
    print("\nAuthorization header:")
    print(f"Bearer {token}")


if __name__ == "__main__":
    main()
