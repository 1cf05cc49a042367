from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from luckydraw.config import Settings  # noqa: E402
from luckydraw.db.engine import make_engine  # noqa: E402
from luckydraw.models import Base  # noqa: E402 - registers every mapped table

config = context.config
target_metadata = Base.metadata

if config.config_file_name is not None and not config.attributes.get("skip_logging"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def target_url() -> str:
    """Pick the database to migrate.

    In order: a URL handed over programmatically via ``Config.attributes``,
    ``alembic -x db_url=...`` on the command line, then ``Settings.from_env()``
    (``DB_URL`` or the local SQLite default).
    """
    url = config.attributes.get("database_url")
    if url:
        return url
    url = context.get_x_argument(as_dictionary=True).get("db_url")
    if url:
        return url
    return Settings.from_env().database_url


def run_migrations_offline() -> None:
    context.configure(
        url=target_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = make_engine(target_url())
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
