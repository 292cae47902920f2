"""Team reconciliation — the decision logic behind apply and destroy.

This package provides:
- Models: the desired ``TeamSpec`` and the committed ``TeamRecord``
- Spec building: validated, fully-defaulted specs from raw attributes
- Lookup and conflict resolution: create, adopt, or fail
- Planning: no-op, in-place update, or destroy-then-create
- Execution: create/read/update/delete against the platform
"""

from forgeteam.teams.models import Permission, TeamRecord, TeamSpec
from forgeteam.teams.planner import Plan, PlanAction, plan_change
from forgeteam.teams.reconciler import ApplyResult, TeamReconciler
from forgeteam.teams.spec_builder import build_spec

__all__ = [
    "ApplyResult",
    "Permission",
    "Plan",
    "PlanAction",
    "TeamReconciler",
    "TeamRecord",
    "TeamSpec",
    "build_spec",
    "plan_change",
]
