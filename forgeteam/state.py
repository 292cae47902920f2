"""File-based JSON storage for committed team records.

Each declared team occupies a *slot* (the key it has in the declaration
file). The store maps slots to the ``TeamRecord`` last committed for them.

Storage path: ``.forgeteam/state.json`` under the working directory unless
another path is given. The file holds a list of ``{"slot": ..., "record": ...}``
dicts.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from forgeteam.errors import StateError
from forgeteam.teams.models import TeamRecord

DEFAULT_STATE_PATH = Path(".forgeteam") / "state.json"


class StateStore:
    """Slot -> TeamRecord persistence backed by a single JSON file."""

    def __init__(self, path: Optional[str | Path] = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_STATE_PATH

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_json(self) -> list[dict]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            raise StateError(f"Cannot read state file {self._path}: {e}") from e
        if not isinstance(data, list):
            raise StateError(f"State file {self._path} must hold a list")
        return data

    def _write_json(self, data: list[dict]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, indent=2))
            tmp.replace(self._path)
        except OSError as e:
            raise StateError(f"Cannot write state file {self._path}: {e}") from e

    @staticmethod
    def _entry_to_record(d: dict) -> TeamRecord:
        try:
            return TeamRecord.from_dict(d["record"])
        except (KeyError, TypeError, ValueError) as e:
            raise StateError(f"Malformed state entry for slot {d.get('slot')!r}: {e}") from e

    # ------------------------------------------------------------------
    # Slot access
    # ------------------------------------------------------------------

    def get(self, slot: str) -> Optional[TeamRecord]:
        """Return the committed record for ``slot`` or None."""
        for d in self._read_json():
            if d.get("slot") == slot:
                return self._entry_to_record(d)
        return None

    def put(self, slot: str, record: TeamRecord) -> None:
        """Insert or replace the record for ``slot``."""
        entries = [d for d in self._read_json() if d.get("slot") != slot]
        entries.append({"slot": slot, "record": record.to_dict()})
        entries.sort(key=lambda d: d["slot"])
        self._write_json(entries)

    def remove(self, slot: str) -> bool:
        """Drop ``slot``. Returns False if it was not stored."""
        entries = self._read_json()
        kept = [d for d in entries if d.get("slot") != slot]
        if len(kept) < len(entries):
            self._write_json(kept)
            return True
        return False

    def list_slots(self) -> list[str]:
        return [d["slot"] for d in self._read_json()]

    def items(self) -> list[tuple[str, TeamRecord]]:
        return [(d["slot"], self._entry_to_record(d)) for d in self._read_json()]
