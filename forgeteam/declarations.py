"""Load team declarations from YAML.

A declaration file looks like::

    teams:
      reviewers:
        name: reviewers
        organization: acme
        permission: read
        units: [repo.code, repo.pulls]

Each key under ``teams`` is a slot; its mapping goes through the spec builder.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from forgeteam.errors import ConfigError, ValidationError
from forgeteam.teams.models import TeamSpec
from forgeteam.teams.spec_builder import SpecIssue, build_spec


def parse_declarations(data: object) -> dict[str, TeamSpec]:
    """Build a spec per slot from an already-parsed document.

    Raises:
        ConfigError: the document does not have a ``teams`` mapping.
        ValidationError: one or more teams are invalid; issue paths are
            prefixed with ``teams.<slot>``.
    """
    if not isinstance(data, dict) or not isinstance(data.get("teams", {}), dict):
        raise ConfigError("Declaration file must contain a 'teams' mapping")

    specs: dict[str, TeamSpec] = {}
    issues: list[SpecIssue] = []
    seen: dict[tuple[str, str], str] = {}

    for slot, attrs in (data.get("teams") or {}).items():
        try:
            spec = build_spec(attrs or {})
        except ValidationError as e:
            for issue in e.issues:
                path = f"teams.{slot}.{issue.path}" if issue.path else f"teams.{slot}"
                issues.append(SpecIssue(issue.code, issue.message, path))
            continue

        key = (spec.organization, spec.name)
        if key in seen:
            issues.append(
                SpecIssue(
                    "DUPLICATE_TEAM",
                    f"team '{spec.name}' in '{spec.organization}' is also declared by slot '{seen[key]}'",
                    f"teams.{slot}",
                )
            )
            continue
        seen[key] = str(slot)
        specs[str(slot)] = spec

    if issues:
        raise ValidationError(issues)
    return specs


def load_declarations(path: str | Path) -> dict[str, TeamSpec]:
    """Read and validate a declaration file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"File not found: {path}")
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return parse_declarations(data or {})
