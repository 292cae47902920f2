"""CRUD executor — issue create/read/update/delete calls for teams.

Each call is a single synchronous request; nothing is retried here. Results
come back as canonical ``TeamRecord`` objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from loguru import logger

from forgeteam.teams.models import TeamRecord, TeamSpec
from forgeteam.teams.units import encode_units

if TYPE_CHECKING:
    from forgeteam.client.forgejo import ForgejoClient


def team_body(spec: TeamSpec) -> dict:
    """Wire body for create and edit calls."""
    body = {
        "name": spec.name,
        "description": spec.description,
        "permission": spec.permission.value,
        "can_create_org_repo": spec.can_create_org_repo,
        "includes_all_repositories": spec.includes_all_repositories,
    }
    if spec.units is not None:
        body["units"] = encode_units(spec.units)
    return body


class TeamExecutor:
    """Applies team specs to the platform through a ForgejoClient."""

    def __init__(self, client: ForgejoClient):
        self.client = client

    def create(self, spec: TeamSpec) -> TeamRecord:
        """Create a new team.

        Raises:
            AlreadyExists: the platform reports a duplicate (e.g. a concurrent create).
            OrganizationNotFound: the organization is missing.
        """
        record = self.client.create_team(spec.organization, team_body(spec))
        logger.info("created team {}/{} (id={})", record.organization, record.name, record.id)
        return record

    def read(self, team_id: int) -> TeamRecord:
        """Fetch a team by id. Raises NotFound if it is gone."""
        return self.client.get_team(team_id)

    def update(self, team_id: int, spec: TeamSpec, prior: Optional[TeamRecord] = None) -> TeamRecord:
        """Push every mutable attribute of ``spec`` onto team ``team_id``.

        The full desired state is sent each time, so repeating the call with
        the same spec leaves the team unchanged. Raises NotFound if the team
        no longer exists.
        """
        body = team_body(spec)
        if spec.units is None and prior is not None:
            body["units"] = encode_units(prior.units)
        record = self.client.edit_team(team_id, body, organization=spec.organization)
        logger.info("updated team {}/{} (id={})", record.organization, record.name, record.id)
        return record

    def delete(self, team_id: int) -> None:
        """Delete a team; an already-absent team counts as deleted."""
        if self.client.delete_team(team_id):
            logger.info("deleted team id={}", team_id)
        else:
            logger.info("team id={} already absent, nothing to delete", team_id)
