from __future__ import annotations

from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from basal_tool.config import (
    ENV_DB_PATH,
    ENV_TIMEZONE,
    BasalConfig,
    default_db_path,
    local_zone,
    now,
    resolve_config,
    today,
)


def test_explicit_values_win_over_environment(tmp_path: Path) -> None:
    env = {ENV_DB_PATH: "/env/basal.db", ENV_TIMEZONE: "Europe/Madrid"}
    config = resolve_config(
        db_path=tmp_path / "x.db", timezone="America/Argentina/Buenos_Aires", environ=env
    )
    assert config.db_path == tmp_path / "x.db"
    assert config.timezone == "America/Argentina/Buenos_Aires"


def test_environment_then_defaults() -> None:
    config = resolve_config(environ={ENV_DB_PATH: "/env/basal.db"})
    assert config.db_path == Path("/env/basal.db")
    assert config.timezone == ""

    config = resolve_config(environ={})
    assert config.db_path == default_db_path()


def test_unknown_timezone_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown timezone"):
        resolve_config(timezone="Mars/Olympus_Mons", environ={})


def test_today_returns_date(tmp_path: Path) -> None:
    value = today(BasalConfig(db_path=tmp_path / "x.db", timezone="UTC"))
    assert isinstance(value, date)
    assert isinstance(today(BasalConfig(db_path=tmp_path / "x.db")), date)


def test_now_is_aware_in_configured_zone(tmp_path: Path) -> None:
    config = BasalConfig(db_path=tmp_path / "x.db", timezone="UTC")
    assert local_zone(config).utcoffset(datetime(2024, 1, 1)) == timedelta(0)
    assert now(config).utcoffset() == timedelta(0)
    assert now(BasalConfig(db_path=tmp_path / "x.db")).tzinfo is not None
