"""Script to run database migrations."""

import argparse
import sys

from alembic import command
from alembic.config import Config


def main() -> int:
    parser = argparse.ArgumentParser(description="Manage database schema revisions")
    subparsers = parser.add_subparsers(dest="action")

    upgrade = subparsers.add_parser("upgrade", help="Upgrade to a revision (default: head)")
    upgrade.add_argument("revision", nargs="?", default="head")

    downgrade = subparsers.add_parser("downgrade", help="Downgrade to a revision")
    downgrade.add_argument("revision")

    create = subparsers.add_parser("create", help="Autogenerate a revision from the models")
    create.add_argument("message", nargs="+")

    args = parser.parse_args()
    alembic_cfg = Config("alembic.ini")

    try:
        if args.action == "create":
            message = " ".join(args.message)
            print(f"Creating migration: {message}")
            command.revision(alembic_cfg, message=message, autogenerate=True)
        elif args.action == "downgrade":
            print(f"Downgrading to {args.revision}...")
            command.downgrade(alembic_cfg, args.revision)
        else:
            revision = getattr(args, "revision", "head")
            print(f"Upgrading to {revision}...")
            command.upgrade(alembic_cfg, revision)
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        return 1

    print("✓ Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
