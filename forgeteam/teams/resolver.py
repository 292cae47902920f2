"""Conflict resolution — decide between create, adopt and fail.

| Lookup result | import_if_exists | Decision |
|---------------|------------------|----------|
| not found     | any              | CREATE   |
| found         | false            | FAIL     |
| found         | true             | ADOPT    |
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from forgeteam.errors import AlreadyExists
from forgeteam.teams.lookup import LookupResult
from forgeteam.teams.models import TeamRecord


class DecisionKind(str, Enum):
    CREATE = "create"
    ADOPT = "adopt"
    FAIL = "fail"


@dataclass(frozen=True)
class Decision:
    """What to do about a lookup result.

    ``baseline`` is set for ADOPT (the record to update from) and ``error`` for
    FAIL (the error the caller must raise).
    """

    kind: DecisionKind
    baseline: Optional[TeamRecord] = None
    error: Optional[AlreadyExists] = None


def resolve_conflict(lookup: LookupResult, import_if_exists: bool) -> Decision:
    if not lookup.exists:
        return Decision(DecisionKind.CREATE)
    if import_if_exists:
        return Decision(DecisionKind.ADOPT, baseline=lookup.found)
    return Decision(
        DecisionKind.FAIL,
        error=AlreadyExists(lookup.organization, lookup.name),
    )
