"""Alembic helpers shared by the command line scripts and the test suite."""
from __future__ import annotations

from typing import Optional

from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from .engine import ROOT_DIR, make_engine
from ..models import Base


def alembic_config(database_url: Optional[str] = None) -> Config:
    """Return the Alembic config of this checkout.

    The script location is made absolute so commands work from any working
    directory. When ``database_url`` is given, alembic/env.py migrates that
    database instead of the one configured through ``DB_URL``.
    """
    cfg = Config(str(ROOT_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT_DIR / "alembic"))
    if database_url is not None:
        cfg.attributes["database_url"] = database_url
        # the caller owns logging
        cfg.attributes["skip_logging"] = True
    return cfg


def upgrade_db(target_revision: str = "head", database_url: Optional[str] = None) -> None:
    """Apply Alembic migrations up to the requested revision."""
    command.upgrade(alembic_config(database_url), target_revision)


def downgrade_db(target_revision: str, database_url: Optional[str] = None) -> None:
    command.downgrade(alembic_config(database_url), target_revision)


def head_revision() -> Optional[str]:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def table_names(database_url: Optional[str] = None) -> list[str]:
    """Return the sorted table names of the configured database."""
    engine = make_engine(database_url)
    try:
        return sorted(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def describe_diff(diff: list) -> list[str]:
    """Flatten ``compare_metadata`` output into readable lines.

    Column level changes come back as nested lists of tuples; everything else
    is a single ``(operation, object, ...)`` tuple.
    """
    lines = []
    for entry in diff:
        if isinstance(entry, list):
            lines.extend(describe_diff(entry))
            continue
        op_name, *details = entry
        lines.append(f"{op_name}: {', '.join(str(d) for d in details)}")
    return lines


def schema_drift(database_url: Optional[str] = None) -> list[str]:
    """Compare a database against the luckydraw models.

    Returns
    -------
    list[str]
        One line per problem found: a database that is not at the migrations
        head, or a difference between its schema and the ORM models. Empty
        when both agree.
    """
    head = head_revision()
    engine = make_engine(database_url)
    try:
        with engine.connect() as connection:
            context = MigrationContext.configure(
                connection, opts={"compare_type": True}
            )
            current = context.get_current_revision()
            if current != head:
                return [f"database is at {current or 'base'}, migrations head is {head}"]
            return describe_diff(compare_metadata(context, Base.metadata))
    finally:
        engine.dispose()


__all__ = [
    "alembic_config",
    "describe_diff",
    "downgrade_db",
    "head_revision",
    "schema_drift",
    "table_names",
    "upgrade_db",
]
