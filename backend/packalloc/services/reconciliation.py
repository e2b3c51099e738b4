"""
Allocation Reconciliation
==========================
The two consistency checks that gate closeout:
- allocation totals vs. ship units
- scanned totals vs. allocation totals

Nothing here blocks; the caller decides whether to proceed on a mismatch.
"""
from typing import List, Dict, Any, Optional, Iterable, Mapping

from loguru import logger

from packalloc.services.matrix import diff_per_size, equals_per_size, per_size_totals, clamp_int


def mismatch_lines(
    left: Mapping[str, int], right: Mapping[str, int], sizes: Iterable[str],
    left_label: str, right_label: str,
) -> List[str]:
    lines = []
    diffs = diff_per_size(left, right, sizes)
    for s, d in diffs.items():
        if d != 0:
            lines.append(f"{s}: {left_label} {left.get(s, 0)} vs {right_label} {right.get(s, 0)} (diff {d})")
    return lines


def reconcile(
    ship: Optional[Mapping[str, Any]],
    allocation: Optional[Mapping[str, Mapping[str, Any]]],
    locations: Iterable[str],
    sizes: Iterable[str],
    scanned: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Dict[str, Any]:
    """Compare ship units, allocation and (optionally) scan progress per size."""
    locations = list(locations)
    sizes = list(sizes)
    ship_totals = {s: clamp_int((ship or {}).get(s)) for s in sizes}
    alloc_totals = per_size_totals(allocation, locations, sizes)

    allocation_matches_ship = equals_per_size(alloc_totals, ship_totals, sizes)
    result: Dict[str, Any] = {
        "ship_totals": ship_totals,
        "allocation_totals": alloc_totals,
        "allocation_matches_ship": allocation_matches_ship,
        "allocation_vs_ship": diff_per_size(alloc_totals, ship_totals, sizes),
        "mismatches": mismatch_lines(alloc_totals, ship_totals, sizes, "alloc", "ship"),
        "scan_totals": None,
        "scan_matches_allocation": None,
        "scan_vs_allocation": None,
    }

    scan_matches_allocation = False
    if scanned is not None:
        scan_totals = per_size_totals(scanned, locations, sizes)
        scan_matches_allocation = equals_per_size(scan_totals, alloc_totals, sizes)
        result.update({
            "scan_totals": scan_totals,
            "scan_matches_allocation": scan_matches_allocation,
            "scan_vs_allocation": diff_per_size(scan_totals, alloc_totals, sizes),
        })
        result["mismatches"] += mismatch_lines(scan_totals, alloc_totals, sizes, "scanned", "alloc")

    result["ready_for_closeout"] = allocation_matches_ship and scan_matches_allocation

    if result["mismatches"]:
        logger.info(f"Reconciliation found {len(result['mismatches'])} mismatch(es)")
    return result
