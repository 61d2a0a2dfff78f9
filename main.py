#!/usr/bin/env python3
"""
TaskMarket -- microtask marketplace backend.

Usage:
  python main.py init-db
  python main.py init-db --admin-email admin@example.com --admin-password s3cret-pass
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY      Required unless DEBUG=true. At least 32 characters.
  DATABASE_URL    SQLAlchemy URL. Defaults to taskmarket.db next to this file.
  ADMIN_PASSWORD  When set, the admin account is seeded on every startup.
"""

import argparse
import sys

from core.config import get_settings


def _cmd_init_db(args: argparse.Namespace) -> int:
    """Create the schema and seed the admin account.

    Re-running is safe: the schema is created only where missing and an
    existing account with the admin email is left untouched.
    """
    from auth.store import UserStore
    from auth.tokens import ensure_admin_account
    from market.store import MarketStore

    settings = get_settings()
    password = args.admin_password or settings.admin_password
    if not password:
        print("  [!] No admin password given. Use --admin-password or set ADMIN_PASSWORD.")
        return 2
    if len(password) > 72:
        print("  [!] Admin password must be at most 72 characters.")
        return 2

    user_store = UserStore(settings.database_url)
    market = MarketStore(settings.database_url)
    try:
        created = ensure_admin_account(user_store, args.admin_name, args.admin_email, password)
    finally:
        market.close()
        user_store.close()

    if created:
        print(f"  Database initialized. Admin account created: {args.admin_email}")
    else:
        print(f"  Database initialized. {args.admin_email} already exists; left unchanged.")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="taskmarket",
        description="Microtask marketplace backend.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create tables and seed the admin account.")
    init_db.add_argument("--admin-name", default=settings.admin_name)
    init_db.add_argument("--admin-email", default=settings.admin_email)
    init_db.add_argument("--admin-password", default="", help="Defaults to ADMIN_PASSWORD.")
    init_db.set_defaults(func=_cmd_init_db)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development).")
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
