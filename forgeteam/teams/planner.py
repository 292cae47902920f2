"""Replacement planner — compare committed state with a desired spec.

Each team attribute is classified once in ``FIELD_CLASSES``. A change to an
immutable attribute means the remote team must be destroyed and created again
(a new id); changes to mutable attributes are applied in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from forgeteam.teams.models import TeamRecord, TeamSpec
from forgeteam.teams.units import diff_units, encode_units


class FieldClass(Enum):
    IMMUTABLE = "immutable"
    MUTABLE = "mutable"


FIELD_CLASSES: dict[str, FieldClass] = {
    "organization": FieldClass.IMMUTABLE,
    "name": FieldClass.MUTABLE,
    "permission": FieldClass.MUTABLE,
    "units": FieldClass.MUTABLE,
    "can_create_org_repo": FieldClass.MUTABLE,
    "description": FieldClass.MUTABLE,
    "includes_all_repositories": FieldClass.MUTABLE,
}


class PlanAction(str, Enum):
    CREATE = "create"
    NOOP = "no-op"
    IN_PLACE_UPDATE = "update"
    REPLACE = "replace"


@dataclass
class FieldChange:
    """One attribute that differs between committed and desired state."""

    field: str
    before: Any
    after: Any

    @property
    def immutable(self) -> bool:
        return FIELD_CLASSES[self.field] is FieldClass.IMMUTABLE

    def describe(self) -> str:
        if self.field == "units":
            return f"units: {diff_units(self.before, self.after).summary()}"
        marker = " (forces replacement)" if self.immutable else ""
        return f"{self.field}: {self.before!r} -> {self.after!r}{marker}"


@dataclass
class Plan:
    """The planned action for one team and the attribute changes behind it."""

    action: PlanAction
    changes: list[FieldChange] = field(default_factory=list)
    prior: Optional[TeamRecord] = None

    @property
    def requires_replacement(self) -> bool:
        return self.action is PlanAction.REPLACE

    def summary(self) -> str:
        if self.action is PlanAction.NOOP:
            return "no changes"
        if self.action is PlanAction.CREATE:
            return "create"
        details = "; ".join(c.describe() for c in self.changes)
        return f"{self.action.value}: {details}"


def _comparable(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def diff_fields(prior: TeamRecord, spec: TeamSpec) -> list[FieldChange]:
    """List every classified attribute whose desired value differs."""
    changes: list[FieldChange] = []
    for name in FIELD_CLASSES:
        before = getattr(prior, name)
        after = getattr(spec, name)
        if name == "units":
            # Omitted units leave whatever the platform holds.
            if after is None or not diff_units(before, after).changed:
                continue
            changes.append(FieldChange(name, encode_units(before), encode_units(after)))
            continue
        if _comparable(before) != _comparable(after):
            changes.append(FieldChange(name, _comparable(before), _comparable(after)))
    return changes


def plan_change(prior: Optional[TeamRecord], spec: TeamSpec) -> Plan:
    """Decide how to move from ``prior`` (may be None) to ``spec``."""
    if prior is None:
        return Plan(PlanAction.CREATE)

    changes = diff_fields(prior, spec)
    if not changes:
        return Plan(PlanAction.NOOP, prior=prior)
    if any(c.immutable for c in changes):
        return Plan(PlanAction.REPLACE, changes=changes, prior=prior)
    return Plan(PlanAction.IN_PLACE_UPDATE, changes=changes, prior=prior)
