"""Bring the configured database up to the latest schema."""
from __future__ import annotations

import argparse

from luckydraw.db.migrations import table_names, upgrade_db


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("revision", nargs="?", default="head")
    parser.add_argument("--database-url", help="defaults to DB_URL or sqlite:///./dev.db")
    args = parser.parse_args()

    upgrade_db(args.revision, database_url=args.database_url)
    print("Current tables:", ", ".join(table_names(args.database_url)))


if __name__ == "__main__":
    main()
