"""Team/alternates bookkeeping over a ranked candidate list.

All candidates live in one dict keyed by id, each tagged SELECTED or
ALTERNATE. The selected team and the alternates pool are views over that
dict, so a candidate can never be in both or in neither.
"""

import enum
import itertools
import logging
from dataclasses import dataclass

from mobility.core.schemas import ScoredCandidate, TeamAggregates, TeamSnapshot

logger = logging.getLogger(__name__)


class Membership(enum.Enum):
    SELECTED = "selected"
    ALTERNATE = "alternate"


@dataclass
class _Slot:
    scored: ScoredCandidate
    membership: Membership
    rank: int  # position in the original ranking, breaks score ties
    seq: int  # selection order within the team


class TeamSelection:
    """Usage::

        selection = TeamSelection(ranked, positions=2)
        selection.swap("e1", "e6")     # False leaves state untouched
        selection.aggregates.total_cost
    """

    def __init__(self, ranked: list[ScoredCandidate], positions: int) -> None:
        self._counter = itertools.count()
        self._slots: dict[str, _Slot] = {}
        for scored in ranked:
            if scored.candidate_id in self._slots:
                logger.warning("Duplicate candidate %s in ranking - ignored", scored.candidate_id)
                continue
            membership = (
                Membership.SELECTED
                if len(self._slots) < max(0, positions)
                else Membership.ALTERNATE
            )
            self._slots[scored.candidate_id] = _Slot(
                scored=scored,
                membership=membership,
                rank=len(self._slots),
                seq=next(self._counter),
            )
        self._aggregates = self._compute_aggregates()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def selected_team(self) -> list[ScoredCandidate]:
        slots = [s for s in self._slots.values() if s.membership is Membership.SELECTED]
        return [s.scored for s in sorted(slots, key=lambda s: s.seq)]

    @property
    def available_alternatives(self) -> list[ScoredCandidate]:
        slots = [s for s in self._slots.values() if s.membership is Membership.ALTERNATE]
        return [s.scored for s in sorted(slots, key=lambda s: (-s.scored.final_score, s.rank))]

    @property
    def aggregates(self) -> TeamAggregates:
        return self._aggregates

    def membership(self, candidate_id: str) -> Membership | None:
        slot = self._slots.get(candidate_id)
        return slot.membership if slot else None

    def __len__(self) -> int:
        return len(self._slots)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def remove(self, candidate_id: str) -> bool:
        """Move a selected candidate to the alternates pool."""
        if self.membership(candidate_id) is not Membership.SELECTED:
            logger.debug("remove(%s): not in selected team", candidate_id)
            return False
        self._slots[candidate_id].membership = Membership.ALTERNATE
        self._aggregates = self._compute_aggregates()
        return True

    def add(self, candidate_id: str) -> bool:
        """Move an alternate into the selected team (appended at the end)."""
        if self.membership(candidate_id) is not Membership.ALTERNATE:
            logger.debug("add(%s): not in alternates", candidate_id)
            return False
        slot = self._slots[candidate_id]
        slot.membership = Membership.SELECTED
        slot.seq = next(self._counter)
        self._aggregates = self._compute_aggregates()
        return True

    def swap(self, outgoing_id: str, incoming_id: str) -> bool:
        """Replace a selected member with an alternate. Both ids are checked first."""
        if (
            self.membership(outgoing_id) is not Membership.SELECTED
            or self.membership(incoming_id) is not Membership.ALTERNATE
        ):
            logger.debug("swap(%s, %s) rejected", outgoing_id, incoming_id)
            return False
        self._slots[outgoing_id].membership = Membership.ALTERNATE
        incoming = self._slots[incoming_id]
        incoming.membership = Membership.SELECTED
        incoming.seq = next(self._counter)
        self._aggregates = self._compute_aggregates()
        logger.info("Swapped %s out for %s", outgoing_id, incoming_id)
        return True

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------

    def suggest_alternatives(self, candidate_id: str, limit: int = 5) -> list[ScoredCandidate]:
        """Alternates sharing a skill with a selected member, else all alternates."""
        if self.membership(candidate_id) is not Membership.SELECTED:
            return []
        alternates = self.available_alternatives
        member_skills = [s.lower() for s in self._slots[candidate_id].scored.candidate.skills]

        def _similar(alt: ScoredCandidate) -> bool:
            alt_skills = [s.lower() for s in alt.candidate.skills]
            return any(m in a or a in m for m in member_skills for a in alt_skills)

        similar = [alt for alt in alternates if _similar(alt)]
        return (similar or alternates)[:limit]

    def snapshot(self) -> TeamSnapshot:
        return TeamSnapshot(
            selected_team=self.selected_team,
            available_alternatives=self.available_alternatives,
            aggregates=self._aggregates,
        )

    def _compute_aggregates(self) -> TeamAggregates:
        team = self.selected_team
        if not team:
            return TeamAggregates()
        count = len(team)
        return TeamAggregates(
            headcount=count,
            total_cost=sum(s.total_cost for s in team),
            max_visa_days=max(s.visa_days for s in team),
            mean_compliance=sum(s.compliance_score for s in team) / count,
            mean_overall=sum(s.final_score for s in team) / count,
        )
