"""Run the HTTP/WebSocket server after bringing the schema up to date."""
from __future__ import annotations

import argparse
import logging

import uvicorn

from luckydraw.config import Settings
from luckydraw.db.migrations import upgrade_db
from luckydraw.web import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument(
        "--skip-migrations",
        action="store_true",
        help="do not run alembic upgrade before serving",
    )
    args = parser.parse_args()

    settings = Settings.from_env()
    if not args.skip_migrations:
        upgrade_db(database_url=settings.database_url)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-5.5s [%(name)s] %(message)s",
    )
    uvicorn.run(create_app(settings), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
