"""Configuración explícita: ruta de la base y zona horaria."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from pathlib import Path

from dateutil import tz

ENV_DB_PATH = "BASAL_DB"
ENV_TIMEZONE = "BASAL_TZ"


@dataclass(frozen=True)
class BasalConfig:
    """Runtime configuration handed to the store and the CLI.

    ``timezone`` is an IANA name; an empty string means the system zone.
    """

    db_path: Path
    timezone: str = ""


def default_db_path() -> Path:
    return Path.home() / ".config" / "basal" / "basal.sqlite3"


def resolve_config(
    db_path: str | Path | None = None,
    timezone: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> BasalConfig:
    """Build config from explicit values, then environment, then defaults.

    Args:
        db_path: Explicit database path (e.g. from ``--db``).
        timezone: Explicit IANA zone name (e.g. from ``--tz``).
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        ValueError: If the timezone name is unknown.
    """
    env = os.environ if environ is None else environ
    raw_path = db_path or env.get(ENV_DB_PATH) or default_db_path()
    zone = timezone if timezone is not None else env.get(ENV_TIMEZONE, "")
    if zone and tz.gettz(zone) is None:
        raise ValueError(f"Unknown timezone: {zone}")
    return BasalConfig(db_path=Path(raw_path).expanduser(), timezone=zone)


def local_zone(config: BasalConfig) -> tzinfo:
    """Configured timezone, or the system zone when none is set."""
    zone = tz.gettz(config.timezone) if config.timezone else None
    return zone or tz.tzlocal()


def now(config: BasalConfig) -> datetime:
    """Timezone-aware current time in the configured zone."""
    return datetime.now(tz=local_zone(config))


def today(config: BasalConfig) -> date:
    """Current calendar date in the configured timezone."""
    return now(config).date()
