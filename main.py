#!/usr/bin/env python3
"""
JobHunter -- job board backend: accounts, sessions and company directory.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload
  python main.py create-user admin@example.com --name "Site Admin" --role admin

Environment variables (see core/config.py for the full list):
  SECRET_KEY                  HS256 signing key, at least 32 characters.
                              Optional only when DEBUG=true.
  ACCESS_TOKEN_TTL_SECONDS    Access token lifetime. Required.
  REFRESH_TOKEN_TTL_SECONDS   Refresh token and refresh cookie lifetime. Required.
  DATABASE_URL                SQLAlchemy URL. Defaults to ./jobhunter.db.
"""

import argparse
import getpass
import sys

from auth.errors import DuplicateEmail
from auth.session import Profile, SessionManager
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _read_password() -> str:
    """Prompt twice for a password without echoing it."""
    password = getpass.getpass("  Password: ")
    if not password:
        print("  [!] Password must not be empty.")
        return ""
    if getpass.getpass("  Repeat password: ") != password:
        print("  [!] Passwords do not match.")
        return ""
    return password


def _create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    password = _read_password()
    if not password:
        return 1

    store = UserStore(settings.database_url)
    try:
        manager = SessionManager(
            store=store,
            codec=TokenCodec(settings.secret_key, issuer=settings.jwt_issuer),
            access_ttl_seconds=settings.access_token_ttl_seconds,
            refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
        )
        try:
            user = manager.register(args.email, password, Profile(name=args.name or args.email, role=args.role))
        except DuplicateEmail:
            print(f"  [!] An account for '{args.email}' already exists.")
            return 1
    finally:
        store.close()

    print(f"  Created user id={user.id} email={user.email} role={user.role}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="jobhunter",
        description="JobHunter -- job board backend.",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Create an account from the command line.")
    create.add_argument("email", help="Login email of the new account")
    create.add_argument("--name", default=None, help="Display name (default: the email)")
    create.add_argument("--role", default="user", choices=["user", "admin"], help="Account role (default: user)")
    create.set_defaults(func=_create_user)

    args = parser.parse_args()
    if not getattr(args, "func", None):
        parser.print_help()
        sys.exit(1)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
