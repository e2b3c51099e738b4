"""
Size Matrix Helpers
====================
Location × size quantity grids shared by the allocation engine, the
receiving session and the reconciliation checks.

A matrix is a plain ``{location: {size: qty}}`` dict so it can be stored
as a JSON blob by the caller. ``MatrixBuilder`` owns one matrix for the
duration of a run and clamps every write at zero.
"""
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

Matrix = Dict[str, Dict[str, int]]

_SIZE_ALIASES = {
    "X-SMALL": "XS",
    "X SMALL": "XS",
    "XX-SMALL": "XXS",
    "XX SMALL": "XXS",
}


def clamp_int(value: Any) -> int:
    """Coerce to a non-negative int. Blank, None, NaN and junk become 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return max(0, int(value))
    if isinstance(value, str):
        try:
            return max(0, int(value.strip()))
        except ValueError:
            pass
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(n) or math.isinf(n):
        return 0
    return max(0, int(math.floor(n)))


def normalize_size_label(value: Any) -> Optional[str]:
    """Map a variant size label (``"X-Small"``, ``" xs "``) onto a size code."""
    if value is None:
        return None
    label = str(value).strip().upper()
    if not label:
        return None
    return _SIZE_ALIASES.get(label, label)


def empty_matrix(locations: Iterable[str], sizes: Iterable[str]) -> Matrix:
    sizes = list(sizes)
    return {loc: {s: 0 for s in sizes} for loc in locations}


def normalize_matrix(raw: Optional[Mapping], locations: Iterable[str], sizes: Iterable[str]) -> Matrix:
    """Re-shape a stored matrix onto the current locations × sizes grid."""
    sizes = list(sizes)
    raw = raw or {}
    out = {}
    for loc in locations:
        row = raw.get(loc) or {}
        out[loc] = {s: clamp_int(row.get(s)) for s in sizes}
    return out


def sum_sizes(vector: Optional[Mapping], sizes: Iterable[str]) -> int:
    vector = vector or {}
    return sum(clamp_int(vector.get(s)) for s in sizes)


def per_size_totals(matrix: Optional[Mapping], locations: Iterable[str], sizes: Iterable[str]) -> Dict[str, int]:
    """Column sums of ``matrix`` over ``locations``."""
    matrix = matrix or {}
    locations = list(locations)
    return {
        s: sum(clamp_int((matrix.get(loc) or {}).get(s)) for loc in locations)
        for s in sizes
    }


def equals_per_size(a: Optional[Mapping], b: Optional[Mapping], sizes: Iterable[str]) -> bool:
    a, b = a or {}, b or {}
    return all(clamp_int(a.get(s)) == clamp_int(b.get(s)) for s in sizes)


def diff_per_size(a: Optional[Mapping], b: Optional[Mapping], sizes: Iterable[str]) -> Dict[str, int]:
    """``a[s] - b[s]`` for every size (may be negative)."""
    a, b = a or {}, b or {}
    return {s: clamp_int(a.get(s)) - clamp_int(b.get(s)) for s in sizes}


class MatrixBuilder:
    """Mutable location × size grid owned by one allocation run."""

    def __init__(self, locations: Iterable[str], sizes: Iterable[str], initial: Optional[Mapping] = None):
        self.locations: List[str] = list(dict.fromkeys(locations))
        self.sizes: List[str] = list(sizes)
        self._cells = normalize_matrix(initial, self.locations, self.sizes)

    def __contains__(self, location: str) -> bool:
        return location in self._cells

    def get(self, location: str, size: str) -> int:
        return self._cells.get(location, {}).get(size, 0)

    def set(self, location: str, size: str, value: int) -> int:
        if location not in self._cells or size not in self._cells[location]:
            return 0
        self._cells[location][size] = clamp_int(value)
        return self._cells[location][size]

    def add(self, location: str, size: str, delta: int) -> int:
        """Add ``delta`` (may be negative) and return the new cell value."""
        return self.set(location, size, self.get(location, size) + int(delta))

    def add_vector(self, location: str, vector: Mapping[str, int]) -> None:
        for size, qty in vector.items():
            self.add(location, size, qty)

    def row(self, location: str) -> Dict[str, int]:
        return dict(self._cells.get(location, {}))

    def totals(self) -> Dict[str, int]:
        return per_size_totals(self._cells, self.locations, self.sizes)

    def to_dict(self) -> Matrix:
        return {loc: dict(row) for loc, row in self._cells.items()}
