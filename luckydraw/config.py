"""Runtime settings read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .db.engine import ROOT_DIR
from .db.utils import resolve_sqlite_url

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()

DEFAULT_SPIN_DURATION_MS = 4000


def _parse_int(raw: Optional[str], default: int, name: str) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be an integer") from exc
    if value < 0:
        raise ValueError(f"Environment variable '{name}' must be >= 0")
    return value


@dataclass(frozen=True)
class Settings:
    """Settings shared by the web adapter and the command line scripts.

    Attributes
    ----------
    database_url : str
        SQLAlchemy URL. Relative ``sqlite:///./`` paths resolve against the
        project root.
    spin_duration_ms : int
        Default length of the big-screen spin animation announced by
        ``trigger_spin`` when the admin does not supply one.
    log_level : str
        Root logger level used by ``scripts/serve.py``.
    cors_origins : tuple[str, ...]
        Origins allowed by the HTTP adapter.
    """

    database_url: str = "sqlite:///./dev.db"
    spin_duration_ms: int = DEFAULT_SPIN_DURATION_MS
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("LUCKYDRAW_CORS_ORIGINS", "*")
        return cls(
            database_url=resolve_sqlite_url(
                env.get("DB_URL", "sqlite:///./dev.db"), ROOT_DIR
            ),
            spin_duration_ms=_parse_int(
                env.get("LUCKYDRAW_SPIN_DURATION_MS"),
                DEFAULT_SPIN_DURATION_MS,
                "LUCKYDRAW_SPIN_DURATION_MS",
            ),
            log_level=env.get("LUCKYDRAW_LOG_LEVEL", "INFO").upper(),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


__all__ = ["DEFAULT_SPIN_DURATION_MS", "Settings"]
