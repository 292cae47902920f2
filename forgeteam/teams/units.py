"""Capability units — normalization and set comparison.

Units are platform-defined tokens such as ``repo.code``. The platform and the
declaration may list them in any order, with duplicates, so everything here
works on frozensets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

KNOWN_UNITS: frozenset[str] = frozenset(
    {
        "repo.code",
        "repo.issues",
        "repo.ext_issues",
        "repo.wiki",
        "repo.ext_wiki",
        "repo.pulls",
        "repo.releases",
        "repo.projects",
        "repo.packages",
        "repo.actions",
    }
)


@dataclass
class UnitsDiff:
    """Units to add to and remove from the committed set."""

    added: frozenset[str] = field(default_factory=frozenset)
    removed: frozenset[str] = field(default_factory=frozenset)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)

    def summary(self) -> str:
        parts = [f"+{u}" for u in sorted(self.added)]
        parts += [f"-{u}" for u in sorted(self.removed)]
        return ", ".join(parts) or "unchanged"


def normalize_units(units: Iterable[str]) -> frozenset[str]:
    """Return the canonical set form of a unit collection."""
    return frozenset(u.strip() for u in units)


def unknown_units(units: Iterable[str]) -> list[str]:
    """Return the tokens outside the known vocabulary, sorted."""
    return sorted(set(units) - KNOWN_UNITS)


def units_equal(a: Iterable[str], b: Iterable[str]) -> bool:
    return normalize_units(a) == normalize_units(b)


def diff_units(current: Iterable[str], desired: Iterable[str]) -> UnitsDiff:
    cur = normalize_units(current)
    want = normalize_units(desired)
    return UnitsDiff(added=want - cur, removed=cur - want)


def encode_units(units: Iterable[str]) -> list[str]:
    """Wire form: a sorted list so repeated requests are byte-identical."""
    return sorted(normalize_units(units))
