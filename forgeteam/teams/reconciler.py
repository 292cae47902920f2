"""Team reconciler — the CRUD-plus-import contract used by the engine.

The reconciler keeps no state between calls; it can be shared by concurrent
callers as long as each owns a distinct (organization, name) key. Uniqueness
is enforced by the platform, which is why a losing concurrent create surfaces
as ``AlreadyExists``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Union

from loguru import logger

from forgeteam.errors import NotFound
from forgeteam.teams.executor import TeamExecutor
from forgeteam.teams.lookup import lookup_team
from forgeteam.teams.models import TeamRecord, TeamSpec
from forgeteam.teams.planner import Plan, PlanAction, plan_change
from forgeteam.teams.resolver import DecisionKind, resolve_conflict

if TYPE_CHECKING:
    from forgeteam.client.forgejo import ForgejoClient


@dataclass
class ApplyResult:
    """Outcome of applying one spec: the committed record and what was done."""

    record: TeamRecord
    plan: Plan
    steps: list[str] = field(default_factory=list)

    @property
    def adopted(self) -> bool:
        return any(s.startswith("adopt") for s in self.steps)


class TeamReconciler:
    """Converges remote teams onto declared specs."""

    def __init__(self, client: ForgejoClient):
        self.client = client
        self.executor = TeamExecutor(client)

    # -- CRUD contract -------------------------------------------------------

    def create(self, spec: TeamSpec) -> TeamRecord:
        """Create the team, or adopt an existing one when ``import_if_exists``.

        Raises:
            OrganizationNotFound: the organization is missing.
            AlreadyExists: the team exists and adoption is not allowed.
        """
        record, _ = self._create(spec)
        return record

    def read(self, team_id: int) -> TeamRecord:
        """Fetch the committed record. Raises NotFound if the team is gone."""
        return self.executor.read(team_id)

    def update(self, team_id: int, spec: TeamSpec, prior: Optional[TeamRecord] = None) -> TeamRecord:
        return self.executor.update(team_id, spec, prior=prior)

    def delete(self, team_id: int) -> None:
        self.executor.delete(team_id)

    def plan(self, prior: Optional[TeamRecord], spec: TeamSpec) -> Plan:
        return plan_change(prior, spec)

    # -- read-only lookup and import -----------------------------------------

    def lookup(self, organization: str, name: str) -> TeamRecord:
        """Data-source variant: return the team named ``name`` in ``organization``.

        Raises:
            OrganizationNotFound: the organization is missing.
            NotFound: the organization has no such team.
        """
        result = lookup_team(self.client, organization, name)
        if result.found is None:
            raise NotFound(f"Team '{name}' in organization '{organization}'")
        return result.found

    def import_team(self, identifier: Union[int, str]) -> TeamRecord:
        """Fetch an existing team for adoption into state.

        ``identifier`` is either the numeric team id or ``organization/name``.
        """
        if isinstance(identifier, int) or str(identifier).isdigit():
            return self.read(int(identifier))
        organization, sep, name = str(identifier).partition("/")
        if not sep or not organization or not name:
            raise NotFound(f"Team '{identifier}' (expected an id or organization/name)")
        return self.lookup(organization, name)

    # -- full reconciliation ---------------------------------------------------

    def apply(
        self,
        prior: Optional[TeamRecord],
        spec: TeamSpec,
        on_destroyed: Optional[Callable[[TeamRecord], None]] = None,
    ) -> ApplyResult:
        """Bring the remote team in line with ``spec``.

        ``on_destroyed`` is called with the old record as soon as a
        replacement has deleted it, before the new team is created, so the
        caller can drop it from its state even if the create then fails.
        """
        plan = plan_change(prior, spec)
        log = logger.bind(organization=spec.organization, team=spec.name)
        log.debug("plan for {}/{}: {}", spec.organization, spec.name, plan.summary())

        if plan.action is PlanAction.NOOP:
            return ApplyResult(record=prior, plan=plan)

        if plan.action is PlanAction.IN_PLACE_UPDATE:
            record = self.executor.update(prior.id, spec, prior=prior)
            return ApplyResult(record=record, plan=plan, steps=[f"update id={prior.id}"])

        steps: list[str] = []
        if plan.action is PlanAction.REPLACE:
            # Destroy before create: both organizations may hold the same name.
            self.executor.delete(prior.id)
            steps.append(f"delete id={prior.id}")
            if on_destroyed is not None:
                on_destroyed(prior)

        record, create_steps = self._create(spec)
        steps.extend(create_steps)
        return ApplyResult(record=record, plan=plan, steps=steps)

    def _create(self, spec: TeamSpec) -> tuple[TeamRecord, list[str]]:
        lookup = lookup_team(self.client, spec.organization, spec.name)
        decision = resolve_conflict(lookup, spec.import_if_exists)

        if decision.kind is DecisionKind.FAIL:
            raise decision.error

        if decision.kind is DecisionKind.ADOPT:
            baseline = decision.baseline
            steps = [f"adopt id={baseline.id}"]
            logger.info(
                "adopting existing team {}/{} (id={})",
                baseline.organization,
                baseline.name,
                baseline.id,
            )
            if plan_change(baseline, spec).action is PlanAction.NOOP:
                return baseline, steps
            record = self.executor.update(baseline.id, spec, prior=baseline)
            steps.append(f"update id={baseline.id}")
            return record, steps

        record = self.executor.create(spec)
        return record, [f"create id={record.id}"]
