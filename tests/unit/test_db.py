"""Tests for the database layer: init, settings round-trip, run tracking."""

import json
from datetime import datetime, timedelta

import pytest

from mobility.core.db import (
    init_db,
    insert_calculation_run,
    insert_optimization_run,
    load_social_security_settings,
    save_social_security_settings,
)
from mobility.core.schemas import Assignment, SocialSecuritySettings
from mobility.costing.aggregator import calculate_deployment_cost
from mobility.rules.jurisdictions import JurisdictionTable


@pytest.fixture()
def db(tmp_path):  # type: ignore[no-untyped-def]
    """Provide a fresh SQLite connection per test."""
    return init_db(tmp_path / "test.db")


class TestInitDb:
    def test_creates_tables(self, db) -> None:  # type: ignore[no-untyped-def]
        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "settings" in tables
        assert "calculation_runs" in tables
        assert "optimization_runs" in tables

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        """Calling init_db twice on the same path doesn't error."""
        p = tmp_path / "double.db"
        conn1 = init_db(p)
        conn1.close()
        conn2 = init_db(p)
        conn2.close()

    def test_creates_parent_dir(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        conn = init_db(tmp_path / "nested" / "dir" / "x.db")
        conn.close()
        assert (tmp_path / "nested" / "dir" / "x.db").exists()


class TestSocialSecuritySettings:
    def test_defaults_when_absent(self, db) -> None:  # type: ignore[no-untyped-def]
        s = load_social_security_settings(db)
        assert s.include_when_treaty is False
        assert s.include_when_no_treaty is True

    def test_round_trip(self, db) -> None:  # type: ignore[no-untyped-def]
        save_social_security_settings(
            db, SocialSecuritySettings(include_when_treaty=True, include_when_no_treaty=False),
        )
        s = load_social_security_settings(db)
        assert s.include_when_treaty is True
        assert s.include_when_no_treaty is False

    def test_save_replaces_previous(self, db) -> None:  # type: ignore[no-untyped-def]
        save_social_security_settings(db, SocialSecuritySettings(include_when_treaty=True))
        save_social_security_settings(db, SocialSecuritySettings(include_when_treaty=False))
        count = db.execute("SELECT COUNT(*) FROM settings").fetchone()[0]
        assert count == 1
        assert load_social_security_settings(db).include_when_treaty is False

    def test_persists_across_connections(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        p = tmp_path / "persist.db"
        conn = init_db(p)
        save_social_security_settings(conn, SocialSecuritySettings(include_when_no_treaty=False))
        conn.close()
        conn = init_db(p)
        assert load_social_security_settings(conn).include_when_no_treaty is False
        conn.close()

    def test_corrupt_value_gives_defaults(self, db) -> None:  # type: ignore[no-untyped-def]
        db.execute(
            "INSERT INTO settings (key, value_json, updated_at) VALUES (?, ?, ?)",
            ("social_security", '{"include_when_treaty": "maybe"}', "2026-01-01"),
        )
        db.commit()
        assert load_social_security_settings(db) == SocialSecuritySettings()


class TestRunTracking:
    def test_insert_calculation_run(self, db) -> None:  # type: ignore[no-untyped-def]
        result = calculate_deployment_cost(
            Assignment(home_country="Finland", host_country="Brazil",
                       monthly_salary=7000, duration_months=6),
            JurisdictionTable.default(),
        )
        run_id = insert_calculation_run(db, result)
        assert run_id > 0
        row = db.execute("SELECT * FROM calculation_runs WHERE id = ?", (run_id,)).fetchone()
        assert row["host_country"] == "Brazil"
        assert row["is_resident"] == 0
        assert row["grand_total"] == pytest.approx(result.grand_total)
        assert json.loads(row["result_json"])["duration_months"] == 6

    def test_insert_optimization_run(self, db) -> None:  # type: ignore[no-untyped-def]
        now = datetime.now()
        run_id = insert_optimization_run(
            db,
            destination="Brazil",
            role="Lead Engineer",
            positions=2,
            weights={"cost": 70, "speed": 15, "compliance": 15},
            ranked_count=5,
            selected_ids=["e2", "e6"],
            started_at=now,
            finished_at=now + timedelta(seconds=1),
        )
        assert run_id > 0
        row = db.execute("SELECT * FROM optimization_runs WHERE id = ?", (run_id,)).fetchone()
        assert row["destination"] == "Brazil"
        assert json.loads(row["selected_ids"]) == ["e2", "e6"]
        assert json.loads(row["weights_json"])["cost"] == 70
