"""Candidate roster loading (YAML) and the built-in sample roster."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mobility.core.schemas import Candidate

logger = logging.getLogger(__name__)

DEFAULT_ROSTER: tuple[Candidate, ...] = (
    Candidate(
        id="e1", name="Juho Virtanen", nationality="Finland", current_location="Finland",
        role="Lead Engineer", base_salary_eur=8500,
        skills=frozenset({"Wartsila 31", "Start-up", "Safety Lead"}),
    ),
    Candidate(
        id="e2", name="Alex Silva", nationality="Portugal", current_location="Portugal",
        role="Lead Engineer", base_salary_eur=6200,
        skills=frozenset({"Wartsila 31", "Commissioning"}),
    ),
    Candidate(
        id="e3", name="Rahul Patel", nationality="India", current_location="India",
        role="Senior Technician", base_salary_eur=4500,
        skills=frozenset({"Mechanical", "Overhaul"}),
    ),
    Candidate(
        id="e4", name="Sarah Jenkins", nationality="UK", current_location="UAE",
        role="Project Manager", base_salary_eur=9000,
        skills=frozenset({"PMP", "Logistics"}),
    ),
    Candidate(
        id="e5", name="Matti Korhonen", nationality="Finland", current_location="Brazil",
        role="Senior Technician", base_salary_eur=5500,
        skills=frozenset({"Mechanical", "Electrical"}),
    ),
    Candidate(
        id="e6", name="Manny Singh", nationality="UK", current_location="UK",
        role="Lead Engineer", base_salary_eur=5800,
        skills=frozenset({"Technology", "Strategic Workforce Planning", "Expatriate Tax", "PMP"}),
    ),
    Candidate(
        id="e7", name="Benjamin Spilka", nationality="USA", current_location="USA",
        role="Lead Engineer", base_salary_eur=6500,
        skills=frozenset(
            {"Technology", "Strategic Workforce Planning", "Expatriate Tax", "Commissioning"},
        ),
    ),
    Candidate(
        id="e8", name="Benjamin Oghene", nationality="UK", current_location="UK",
        role="Lead Engineer", base_salary_eur=7200,
        skills=frozenset(
            {"Technology", "Strategic Workforce Planning", "Expatriate Tax", "Safety Lead"},
        ),
    ),
)


def load_roster(path: str | Path | None = None) -> list[Candidate]:
    """Load candidates from a YAML file (``candidates: [...]``).

    Returns the built-in sample roster when path is None. Invalid entries are
    skipped with a warning; a missing file raises FileNotFoundError.
    """
    if path is None:
        return list(DEFAULT_ROSTER)

    path = Path(path)
    if not path.exists():
        msg = f"Roster file not found: {path}"
        raise FileNotFoundError(msg)

    raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
    entries = raw.get("candidates") or []
    roster: list[Candidate] = []
    for i, entry in enumerate(entries):
        try:
            roster.append(Candidate.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping roster entry %d in %s: %s", i, path, e.error_count())
    logger.info("Loaded %d candidates from %s", len(roster), path)
    return roster
