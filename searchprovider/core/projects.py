from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class ProjectRecord:
    """A recently used project of one application."""
    id: str              # unique within one application, stable across refreshes
    display_name: str
    path: str
    last_used: int       # milliseconds since the epoch

    def matches(self, terms: Sequence[str]) -> bool:
        """Whether every term occurs in the name or the path, ignoring case."""
        name = self.display_name.lower()
        path = self.path.lower()
        return all(term.lower() in name or term.lower() in path for term in terms)


def _sort_key(record: ProjectRecord):
    return (-record.last_used, record.id)


class ProjectIndex:
    """Immutable, ordered set of project records for one application.

    Records are kept by ``last_used`` descending, ties broken by ``id``.
    """

    def __init__(self, records: Iterable[ProjectRecord] = ()):
        by_id: Dict[str, ProjectRecord] = {}
        for record in records:
            current = by_id.get(record.id)
            if current is None or record.last_used > current.last_used:
                by_id[record.id] = record
        self._records: Tuple[ProjectRecord, ...] = tuple(sorted(by_id.values(), key=_sort_key))
        self._by_id = by_id

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __contains__(self, project_id) -> bool:
        return project_id in self._by_id

    def get(self, project_id: str) -> Optional[ProjectRecord]:
        return self._by_id.get(project_id)

    @property
    def ids(self) -> List[str]:
        return [record.id for record in self._records]

    def search(self, terms: Sequence[str], limit: Optional[int] = None) -> List[str]:
        matches = [record.id for record in self._records if record.matches(terms)]
        return matches[:limit] if limit is not None else matches

    def subsearch(
        self, previous: Sequence[str], terms: Sequence[str], limit: Optional[int] = None
    ) -> List[str]:
        matches = []
        seen = set()
        for project_id in previous:
            if project_id in seen:
                continue
            seen.add(project_id)
            record = self._by_id.get(project_id)
            if record is not None and record.matches(terms):
                matches.append(project_id)
        return matches[:limit] if limit is not None else matches


def abbreviate_home(path: str, home: Optional[str] = None) -> str:
    """Replace a leading home directory in ``path`` with ``~``."""
    home = (home or os.path.expanduser("~")).rstrip("/")
    if home and (path == home or path.startswith(home + "/")):
        return "~" + path[len(home):]
    return path
