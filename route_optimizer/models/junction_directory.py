from __future__ import annotations

from bisect import bisect_left
from typing import Iterable, List, Optional, Tuple

from route_optimizer.models.network import Junction


def _normalize(name: str) -> str:
    return " ".join(name.split()).casefold()


class JunctionDirectory:
    """Sorted, case-insensitive name index over an immutable junction set."""

    def __init__(self, junctions: Iterable[Junction]) -> None:
        entries = sorted(((_normalize(j.name), j.id, j) for j in junctions), key=lambda e: (e[0], e[1]))
        self._keys: List[Tuple[str, int]] = [(key, junction_id) for key, junction_id, _ in entries]
        self._junctions: List[Junction] = [junction for _, _, junction in entries]

    def __len__(self) -> int:
        return len(self._junctions)

    def find_by_name(self, name: str) -> Optional[Junction]:
        key = _normalize(name)
        index = bisect_left(self._keys, (key, -(2**63)))
        if index < len(self._keys) and self._keys[index][0] == key:
            return self._junctions[index]
        return None

    def search(self, prefix: str, limit: Optional[int] = None) -> List[Junction]:
        if limit is not None and limit <= 0:
            return []
        key = _normalize(prefix)
        index = bisect_left(self._keys, (key, -(2**63)))
        matches: List[Junction] = []
        while index < len(self._keys) and self._keys[index][0].startswith(key):
            matches.append(self._junctions[index])
            if limit is not None and len(matches) >= limit:
                break
            index += 1
        return matches
