"""Remote lookup of a team by (organization, name)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from loguru import logger

from forgeteam.teams.models import TeamRecord

if TYPE_CHECKING:
    from forgeteam.client.forgejo import ForgejoClient


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a lookup. ``found`` is None when no team matched."""

    organization: str
    name: str
    found: Optional[TeamRecord] = None

    @property
    def exists(self) -> bool:
        return self.found is not None


def lookup_team(client: ForgejoClient, organization: str, name: str) -> LookupResult:
    """Find the team called ``name`` in ``organization``.

    Raises:
        OrganizationNotFound: if the organization itself does not exist.
    """
    candidates = client.search_teams(organization, name)
    # Search is substring-based and names are case-insensitive on the
    # platform; an exact-case match wins over a case-folded one.
    matches = [t for t in candidates if t.name.lower() == name.lower()]
    matches.sort(key=lambda t: t.name != name)
    found = matches[0] if matches else None
    logger.debug(
        "lookup {}/{}: {}",
        organization,
        name,
        f"found id={found.id}" if found else "not found",
    )
    return LookupResult(organization=organization, name=name, found=found)
