"""Engine — drive the reconciler across a whole declaration file.

The engine owns the state store. It refreshes committed records, plans every
slot, deletes slots that are no longer declared, applies the rest and writes
each committed record back as soon as it exists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from loguru import logger

from forgeteam.errors import ForgeteamError, NotFound, StateError
from forgeteam.state import StateStore
from forgeteam.teams.models import TeamRecord, TeamSpec
from forgeteam.teams.planner import Plan
from forgeteam.teams.reconciler import ApplyResult, TeamReconciler

DELETE = "delete"


@dataclass
class SlotPlan:
    """Planned action for one slot."""

    slot: str
    action: str  # create | no-op | update | replace | delete
    plan: Optional[Plan] = None
    prior: Optional[TeamRecord] = None

    def summary(self) -> str:
        if self.action == DELETE:
            return f"delete (no longer declared, id={self.prior.id})"
        return self.plan.summary()


@dataclass
class SlotOutcome:
    """What happened to one slot during apply or destroy."""

    slot: str
    result: Optional[ApplyResult] = None
    error: Optional[ForgeteamError] = None
    deleted: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ApplyReport:
    outcomes: list[SlotOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> list[SlotOutcome]:
        return [o for o in self.outcomes if not o.ok]


class Engine:
    """Applies declarations through a TeamReconciler and records state."""

    def __init__(self, reconciler: TeamReconciler, store: StateStore):
        self.reconciler = reconciler
        self.store = store

    def refresh(self) -> list[str]:
        """Re-read every stored team; drop slots whose team vanished.

        Returns the dropped slots.
        """
        dropped: list[str] = []
        for slot, record in self.store.items():
            try:
                fresh = self.reconciler.read(record.id)
            except NotFound:
                logger.warning("team for slot '{}' (id={}) no longer exists; dropping it", slot, record.id)
                self.store.remove(slot)
                dropped.append(slot)
                continue
            self.store.put(slot, fresh)
        return dropped

    def plan(self, declarations: dict[str, TeamSpec], refresh: bool = True) -> list[SlotPlan]:
        if refresh:
            self.refresh()
        plans: list[SlotPlan] = []
        for slot, record in self.store.items():
            if slot not in declarations:
                plans.append(SlotPlan(slot=slot, action=DELETE, prior=record))
        for slot, spec in declarations.items():
            prior = self.store.get(slot)
            plan = self.reconciler.plan(prior, spec)
            plans.append(SlotPlan(slot=slot, action=plan.action.value, plan=plan, prior=prior))
        return plans

    def apply(self, declarations: dict[str, TeamSpec], refresh: bool = True) -> ApplyReport:
        """Converge every declared slot; failures are reported per slot."""
        if refresh:
            self.refresh()
        report = ApplyReport()

        # Orphans go first so their names are free for the declared teams.
        for slot, record in self.store.items():
            if slot in declarations:
                continue
            try:
                self.reconciler.delete(record.id)
            except ForgeteamError as e:
                report.outcomes.append(SlotOutcome(slot=slot, error=e))
                continue
            self.store.remove(slot)
            report.outcomes.append(SlotOutcome(slot=slot, deleted=True))

        for slot, spec in declarations.items():
            report.outcomes.append(self._apply_slot(slot, spec))
        return report

    def _apply_slot(self, slot: str, spec: TeamSpec) -> SlotOutcome:
        prior = self.store.get(slot)
        try:
            result = self.reconciler.apply(
                prior, spec, on_destroyed=lambda _old: self.store.remove(slot)
            )
        except NotFound as e:
            # The team vanished between refresh and update.
            logger.warning("team for slot '{}' disappeared: {}", slot, e)
            self.store.remove(slot)
            return SlotOutcome(slot=slot, error=e)
        except ForgeteamError as e:
            logger.error("slot '{}' failed: {}", slot, e)
            return SlotOutcome(slot=slot, error=e)

        self.store.put(slot, result.record)
        return SlotOutcome(slot=slot, result=result)

    def destroy(self) -> ApplyReport:
        """Delete every team in state."""
        report = ApplyReport()
        for slot, record in self.store.items():
            try:
                self.reconciler.delete(record.id)
            except ForgeteamError as e:
                report.outcomes.append(SlotOutcome(slot=slot, error=e))
                continue
            self.store.remove(slot)
            report.outcomes.append(SlotOutcome(slot=slot, deleted=True))
        return report

    def import_team(self, slot: str, identifier: Union[int, str]) -> TeamRecord:
        """Bring an existing team under management as ``slot``."""
        if self.store.get(slot) is not None:
            raise StateError(f"Slot '{slot}' is already managed; remove it before importing")
        record = self.reconciler.import_team(identifier)
        self.store.put(slot, record)
        logger.info("imported team {}/{} (id={}) as '{}'", record.organization, record.name, record.id, slot)
        return record
