"""Static spatial adjacency between location symbols."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence


class UnknownLocationError(LookupError):
    """Raised when a ground-truth location has no adjacency entry."""

    def __init__(self, location: int) -> None:
        super().__init__(f"Location 0x{location:04x} is not registered in the neighbor table.")
        self.location = location


def _parse_symbol(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid location symbol: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 0)
    raise ValueError(f"Invalid location symbol: {value!r}")


class NeighborOracle:
    """Answers whether a predicted location is a declared neighbor of the actual one.

    The relation is taken exactly as declared: `b`'s list says which symbols
    count as neighbors of `b`, with no implied symmetry or reflexivity.
    """

    def __init__(self, table: Mapping[int, Sequence[int]]) -> None:
        self._neighbors: dict[int, frozenset[int]] = {
            int(location): frozenset(int(n) for n in neighbors)
            for location, neighbors in table.items()
        }

    def __len__(self) -> int:
        return len(self._neighbors)

    def __contains__(self, location: object) -> bool:
        return location in self._neighbors

    def neighbors_of(self, location: int) -> frozenset[int]:
        try:
            return self._neighbors[int(location)]
        except KeyError:
            raise UnknownLocationError(int(location)) from None

    def are_neighbors(self, predicted: int, actual: int) -> bool:
        """Return True iff `predicted` is declared in `actual`'s adjacency list."""

        return int(predicted) in self.neighbors_of(actual)

    @classmethod
    def from_json(cls, path: str | Path) -> "NeighborOracle":
        """Load `{"<location>": [<neighbor>, ...]}`; keys and values may be hex strings."""

        table_path = Path(path)
        if not table_path.exists():
            raise FileNotFoundError(f"Missing neighbor table: {table_path}")
        with table_path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, dict):
            raise ValueError(f"Expected a JSON object in {table_path}.")
        table = {
            _parse_symbol(location): [_parse_symbol(n) for n in neighbors]
            for location, neighbors in raw.items()
        }
        return cls(table)

    def to_json(self, path: str | Path) -> None:
        payload = {
            f"0x{location:04x}": [f"0x{n:04x}" for n in sorted(neighbors)]
            for location, neighbors in sorted(self._neighbors.items())
        }
        with Path(path).open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
