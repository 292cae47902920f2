"""Team domain models: the desired spec and the committed record."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from forgeteam.teams.units import encode_units, normalize_units


class Permission(str, Enum):
    """Access level a team grants on the organization's repositories."""

    none = "none"
    read = "read"
    write = "write"
    admin = "admin"


@dataclass(frozen=True)
class TeamSpec:
    """Desired state of a team, as declared by the caller.

    ``units`` is ``None`` when the declaration does not mention units; the
    platform's value is then left alone. ``import_if_exists`` is input-only
    and never reaches a ``TeamRecord``.
    """

    name: str
    organization: str
    permission: Permission = Permission.none
    units: Optional[frozenset[str]] = None
    can_create_org_repo: bool = False
    description: str = ""
    includes_all_repositories: bool = False
    import_if_exists: bool = False


@dataclass(frozen=True)
class TeamRecord:
    """Committed state of a team on the platform."""

    id: int
    name: str
    organization: str
    permission: Permission = Permission.none
    units: frozenset[str] = field(default_factory=frozenset)
    can_create_org_repo: bool = False
    description: str = ""
    includes_all_repositories: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.permission, str) and not isinstance(self.permission, Permission):
            object.__setattr__(self, "permission", Permission(self.permission))
        if not isinstance(self.units, frozenset):
            object.__setattr__(self, "units", normalize_units(self.units))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "organization": self.organization,
            "permission": self.permission.value,
            "units": encode_units(self.units),
            "can_create_org_repo": self.can_create_org_repo,
            "description": self.description,
            "includes_all_repositories": self.includes_all_repositories,
        }

    @classmethod
    def from_dict(cls, d: dict) -> TeamRecord:
        return cls(
            id=int(d["id"]),
            name=d["name"],
            organization=d["organization"],
            permission=Permission(d.get("permission", "none")),
            units=normalize_units(d.get("units", [])),
            can_create_org_repo=bool(d.get("can_create_org_repo", False)),
            description=d.get("description", "") or "",
            includes_all_repositories=bool(d.get("includes_all_repositories", False)),
        )
