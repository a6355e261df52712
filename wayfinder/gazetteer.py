"""
wayfinder/gazetteer.py
Static alias -> canonical name table used by the entity resolver.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List


class GazetteerError(Exception):
    """Raised when the alias table is malformed."""


def _clean(text: str) -> str:
    return " ".join((text or "").lower().split())


@dataclass(frozen=True)
class GazetteerEntry:
    alias: str
    canonical: str
    # Base types such as "Security Checkpoint" only exist with a number after them.
    requires_number: bool = False


class Gazetteer:
    def __init__(self, entries: Iterable[GazetteerEntry]):
        self._entries: List[GazetteerEntry] = []
        seen = {}
        for entry in entries:
            alias = _clean(entry.alias)
            canonical = " ".join((entry.canonical or "").split())
            if not alias:
                raise GazetteerError(f"empty alias for canonical name {entry.canonical!r}")
            if not canonical:
                raise GazetteerError(f"alias {alias!r} has no canonical name")
            previous = seen.get(alias)
            if previous is not None:
                if previous != (canonical, entry.requires_number):
                    raise GazetteerError(f"alias {alias!r} is declared twice with different targets")
                continue
            seen[alias] = (canonical, entry.requires_number)
            self._entries.append(GazetteerEntry(alias, canonical, entry.requires_number))

        if not self._entries:
            raise GazetteerError("gazetteer is empty")

    @classmethod
    def from_rows(cls, rows: Iterable[Any]) -> "Gazetteer":
        """Build from (alias, canonical[, requires_number]) tuples or dicts."""
        entries = []
        for row in rows:
            if isinstance(row, dict):
                entries.append(GazetteerEntry(
                    row.get("alias", ""),
                    row.get("canonical", ""),
                    bool(row.get("requires_number", row.get("requiresNumber", False))),
                ))
            else:
                alias, canonical, *rest = row
                entries.append(GazetteerEntry(alias, canonical, bool(rest[0]) if rest else False))
        return cls(entries)

    def __iter__(self) -> Iterator[GazetteerEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
