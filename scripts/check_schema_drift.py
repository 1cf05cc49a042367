"""Check that a database is migrated to head and matches the luckydraw models.

Exit status: 0 when in sync, 1 on pending migrations or schema differences,
2 when the check itself could not run.
"""
from __future__ import annotations

import argparse
import sys
from typing import Optional

from sqlalchemy.engine import make_url

from luckydraw.db.engine import DEFAULT_SQLITE_URL
from luckydraw.db.migrations import schema_drift


def main(database_url: Optional[str] = None) -> int:
    url = make_url(database_url or DEFAULT_SQLITE_URL)
    url_display = url.render_as_string(hide_password=True)
    try:
        problems = schema_drift(database_url)
    except Exception as exc:
        print(f"Schema drift check: ERROR for {url_display}: {exc}", file=sys.stderr)
        return 2
    if not problems:
        print(f"Schema drift check: OK (no differences) for {url_display}.")
        return 0
    print(f"Schema drift check: FAILED for {url_display}. Differences detected:")
    for line in problems:
        print(f"- {line}")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--database-url", help="defaults to DB_URL or sqlite:///./dev.db")
    args = parser.parse_args()
    raise SystemExit(main(args.database_url))
