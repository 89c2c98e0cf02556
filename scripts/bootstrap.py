"""Utility script to initialize storage and seed a back-office user.

Run any time after configuring your .env, e.g.:
    python scripts/bootstrap.py --username admin --role super_admin

You will be prompted for a password if --password is not supplied.
"""

from __future__ import annotations

import argparse
import sys
from getpass import getpass
from pathlib import Path

# Ensure the project root is on sys.path so `catalog_site` imports resolve
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from catalog_site.core.config import get_settings
from catalog_site.core.errors import StorageFault
from catalog_site.core.security import configure_password_hashing
from catalog_site.db.seed import ensure_user, seed_default_content
from catalog_site.db.session import build_storage


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Setup storage and seed a back-office user.")
    parser.add_argument("--username", required=True, help="User name for the account.")
    parser.add_argument(
        "--password",
        help="Password for the account (omit to receive an interactive prompt).",
    )
    parser.add_argument(
        "--role",
        choices=["super_admin", "manager"],
        default="super_admin",
        help="Role to assign (default: super_admin).",
    )
    parser.add_argument(
        "--skip-content",
        action="store_true",
        help="Do not seed default settings and hero images.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Ensure settings are loaded so environment variables are validated early.
    settings = get_settings()
    configure_password_hashing(settings.password_hash_rounds)
    if settings.storage_backend == "memory" and not settings.data_file:
        print("Error: STORAGE_BACKEND=memory without DATA_FILE keeps nothing after this script exits.")
        return 1
    print(f"Using storage backend: {settings.storage_backend}")

    try:
        storage = build_storage(settings)
        if not args.skip_content:
            print("Seeding default content (existing content is kept)...")
            seed_default_content(storage)

        password = args.password
        if password is None:
            password = getpass("Password (leave blank to keep current if account exists): ").strip() or None

        user, created = ensure_user(storage, args.username, password, role=args.role)
    except (ValueError, StorageFault) as exc:
        print(f"Error: {exc}")
        return 1

    if created:
        print(f"User created: {user.username} ({user.role})")
    elif password:
        print(f"User {user.username} updated (password refreshed, role {user.role}).")
    else:
        print(f"User {user.username} already exists (role {user.role}).")

    print("Bootstrap complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
