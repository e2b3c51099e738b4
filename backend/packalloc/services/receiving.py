"""
Receiving Session
==================
Scan-entry bookkeeping for one product line: each scan adds one unit to
a location × size cell, capped by the allocation unless overridden, with
an undo stack of accepted scans.
"""
from typing import List, Dict, Any, Optional, Iterable, Mapping, Tuple

from loguru import logger

from packalloc.services.matrix import MatrixBuilder, normalize_matrix, normalize_size_label


class ReceivingSession:
    """In-memory scan matrix checked against an allocation."""

    def __init__(
        self,
        allocation: Optional[Mapping],
        locations: Iterable[str],
        sizes: Iterable[str],
        scanned: Optional[Mapping] = None,
    ):
        self.locations = list(dict.fromkeys(locations))
        self.sizes = list(sizes)
        self.allocation = normalize_matrix(allocation, self.locations, self.sizes)
        self._scan = MatrixBuilder(self.locations, self.sizes, initial=scanned)
        self._history: List[Tuple[str, str]] = []

    def _resolve(self, location: str, size: Any) -> Tuple[str, str]:
        if location not in self.allocation:
            raise ValueError(f"Unknown location '{location}'")
        code = normalize_size_label(size)
        if code not in self.sizes:
            raise ValueError(f"Scanned size '{size}' is not in the size matrix")
        return location, code

    def allocated(self, location: str, size: str) -> int:
        return self.allocation.get(location, {}).get(size, 0)

    def scanned(self, location: str, size: str) -> int:
        return self._scan.get(location, size)

    def scan(self, location: str, size: Any, override: bool = False) -> Dict[str, Any]:
        """Record one unit. Refused when it would exceed the allocation, unless overridden."""
        location, size = self._resolve(location, size)
        allocated = self.allocated(location, size)
        current = self._scan.get(location, size)
        over = current + 1 > allocated

        if over and not override:
            logger.info(f"Over allocation blocked: {location} {size} (alloc {allocated})")
            return {
                "accepted": False,
                "over_allocation": True,
                "location": location,
                "size": size,
                "scanned": current,
                "allocated": allocated,
            }

        new_value = self._scan.add(location, size, 1)
        self._history.append((location, size))
        if over:
            logger.info(f"Override: scanned beyond allocation for {location} {size}")

        return {
            "accepted": True,
            "over_allocation": over,
            "location": location,
            "size": size,
            "scanned": new_value,
            "allocated": allocated,
        }

    def undo(self) -> Optional[Dict[str, Any]]:
        """Revert the last accepted scan."""
        if not self._history:
            return None
        location, size = self._history.pop()
        value = self._scan.add(location, size, -1)
        return {"location": location, "size": size, "scanned": value}

    def bump(self, location: str, size: Any, delta: int) -> int:
        location, size = self._resolve(location, size)
        return self._scan.add(location, size, delta)

    def set_count(self, location: str, size: Any, value: Any) -> int:
        location, size = self._resolve(location, size)
        return self._scan.set(location, size, value)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    def totals(self) -> Dict[str, int]:
        return self._scan.totals()

    def over_allocated_cells(self) -> List[Dict[str, Any]]:
        cells = []
        for loc in self.locations:
            for s in self.sizes:
                scanned = self._scan.get(loc, s)
                allocated = self.allocated(loc, s)
                if scanned > allocated:
                    cells.append({"location": loc, "size": s, "scanned": scanned, "allocated": allocated})
        return cells

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return self._scan.to_dict()
