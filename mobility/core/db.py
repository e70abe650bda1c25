"""SQLite database layer for settings and calculation/optimization run tracking."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from mobility.core.schemas import CostResult, SocialSecuritySettings

logger = logging.getLogger(__name__)

SS_SETTINGS_KEY = "social_security"

_SETTINGS_TABLE = """
CREATE TABLE IF NOT EXISTS settings (
    key         TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_CALCULATION_RUNS_TABLE = """
CREATE TABLE IF NOT EXISTS calculation_runs (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    home_country        TEXT    NOT NULL,
    host_country        TEXT    NOT NULL,
    duration_months     INTEGER NOT NULL,
    is_resident         INTEGER NOT NULL,
    grand_total         REAL    NOT NULL,
    additional_cost     REAL    NOT NULL,
    rules_version       TEXT    NOT NULL DEFAULT '',
    result_json         TEXT    NOT NULL,
    created_at          TEXT    NOT NULL
);
"""

_OPTIMIZATION_RUNS_TABLE = """
CREATE TABLE IF NOT EXISTS optimization_runs (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    destination     TEXT    NOT NULL,
    role            TEXT    NOT NULL,
    positions       INTEGER NOT NULL,
    weights_json    TEXT    NOT NULL,
    ranked_count    INTEGER NOT NULL,
    selected_ids    TEXT    NOT NULL,
    started_at      TEXT    NOT NULL,
    finished_at     TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_SETTINGS_TABLE)
    conn.execute(_CALCULATION_RUNS_TABLE)
    conn.execute(_OPTIMIZATION_RUNS_TABLE)
    conn.commit()
    return conn


def load_social_security_settings(conn: sqlite3.Connection) -> SocialSecuritySettings:
    """Return the stored social security preference, or defaults when absent."""
    row = conn.execute(
        "SELECT value_json FROM settings WHERE key = ?", (SS_SETTINGS_KEY,),
    ).fetchone()
    if row is None:
        return SocialSecuritySettings()
    try:
        return SocialSecuritySettings.model_validate_json(row["value_json"])
    except ValidationError:
        logger.warning("Stored social security settings are invalid - using defaults")
        return SocialSecuritySettings()


def save_social_security_settings(
    conn: sqlite3.Connection,
    settings: SocialSecuritySettings,
) -> None:
    """Persist the social security preference (replaces any previous value)."""
    conn.execute(
        """
        INSERT INTO settings (key, value_json, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(key)
        DO UPDATE SET value_json = excluded.value_json, updated_at = excluded.updated_at
        """,
        (SS_SETTINGS_KEY, settings.model_dump_json(), datetime.now().isoformat()),
    )
    conn.commit()


def insert_calculation_run(conn: sqlite3.Connection, result: CostResult) -> int:
    """Record a completed cost calculation. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO calculation_runs
            (home_country, host_country, duration_months, is_resident,
             grand_total, additional_cost, rules_version, result_json, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            result.home_country,
            result.host_country,
            result.duration_months,
            int(result.is_resident),
            result.grand_total,
            result.additional_cost,
            result.rules_version,
            result.model_dump_json(),
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def insert_optimization_run(
    conn: sqlite3.Connection,
    destination: str,
    role: str,
    positions: int,
    weights: dict[str, float],
    ranked_count: int,
    selected_ids: list[str],
    started_at: datetime,
    finished_at: datetime,
) -> int:
    """Record a completed optimization run. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO optimization_runs
            (destination, role, positions, weights_json, ranked_count,
             selected_ids, started_at, finished_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            destination,
            role,
            positions,
            json.dumps(weights),
            ranked_count,
            json.dumps(selected_ids),
            started_at.isoformat(),
            finished_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0
