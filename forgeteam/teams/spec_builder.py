"""Spec builder — turn a raw attribute mapping into a validated TeamSpec.

Declarations arrive as loosely-typed mappings (parsed YAML, CLI input). All
defaults live in ``DEFAULTS`` below; nothing relies on the platform filling
in a value. Every problem is collected before raising so the caller sees the
whole list at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from forgeteam.errors import ValidationError
from forgeteam.teams.models import Permission, TeamSpec
from forgeteam.teams.units import normalize_units, unknown_units

DEFAULTS: dict[str, Any] = {
    "permission": Permission.none.value,
    "units": None,
    "can_create_org_repo": False,
    "description": "",
    "includes_all_repositories": False,
    "import_if_exists": False,
}

REQUIRED_FIELDS = ("name", "organization")
BOOL_FIELDS = ("can_create_org_repo", "includes_all_repositories", "import_if_exists")
KNOWN_FIELDS = set(REQUIRED_FIELDS) | set(DEFAULTS)


@dataclass
class SpecIssue:
    """A single problem found in a team declaration."""

    code: str  # Machine-readable issue code
    message: str
    path: str = ""

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def build_spec(raw: Mapping[str, Any]) -> TeamSpec:
    """Validate and default ``raw`` into a TeamSpec.

    Raises:
        ValidationError: with every issue found.
    """
    issues: list[SpecIssue] = []

    if not isinstance(raw, Mapping):
        raise ValidationError(
            [SpecIssue("NOT_A_MAPPING", f"expected a mapping, got {type(raw).__name__}")]
        )

    attrs = {**DEFAULTS, **raw}

    for key in sorted(set(raw) - KNOWN_FIELDS):
        issues.append(SpecIssue("UNKNOWN_ATTRIBUTE", f"unknown attribute '{key}'", key))

    for key in REQUIRED_FIELDS:
        value = attrs.get(key)
        if not isinstance(value, str) or not value.strip():
            issues.append(SpecIssue("REQUIRED", f"'{key}' must be a non-empty string", key))

    permission = attrs["permission"]
    if isinstance(permission, Permission):
        permission = permission.value
    if not isinstance(permission, str) or permission not in {p.value for p in Permission}:
        allowed = ", ".join(p.value for p in Permission)
        issues.append(
            SpecIssue(
                "INVALID_PERMISSION",
                f"permission '{permission}' is not one of: {allowed}",
                "permission",
            )
        )

    for key in BOOL_FIELDS:
        if not isinstance(attrs[key], bool):
            issues.append(SpecIssue("NOT_A_BOOL", f"'{key}' must be true or false", key))

    description = attrs["description"]
    if description is None:
        description = ""
    elif not isinstance(description, str):
        issues.append(SpecIssue("NOT_A_STRING", "'description' must be a string", "description"))

    units = attrs["units"]
    if units is not None:
        if not isinstance(units, (list, tuple, set, frozenset)) or not all(
            isinstance(u, str) for u in units
        ):
            issues.append(SpecIssue("NOT_A_LIST", "'units' must be a list of strings", "units"))
        else:
            units = normalize_units(units)
            if not units:
                issues.append(
                    SpecIssue("UNITS_EMPTY", "'units' must not be empty when supplied", "units")
                )
            bad = unknown_units(units)
            if bad:
                issues.append(
                    SpecIssue("UNKNOWN_UNIT", f"unknown unit(s): {', '.join(bad)}", "units")
                )

    if issues:
        raise ValidationError(issues)

    return TeamSpec(
        name=attrs["name"].strip(),
        organization=attrs["organization"].strip(),
        permission=Permission(permission),
        units=units,
        can_create_org_repo=attrs["can_create_org_repo"],
        description=description,
        includes_all_repositories=attrs["includes_all_repositories"],
        import_if_exists=attrs["import_if_exists"],
    )
