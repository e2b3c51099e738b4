"""
Allocation Sheets
==================
Tabular views of an allocation matrix for export and closeout review.
"""
from typing import Iterable, Mapping, Optional

import pandas as pd

from packalloc.services.matrix import normalize_matrix

TOTAL_LABEL = "Total"


def allocation_frame(
    matrix: Optional[Mapping], locations: Iterable[str], sizes: Iterable[str]
) -> pd.DataFrame:
    """Locations × sizes grid with a Total column and a Total row."""
    locations = list(locations)
    sizes = list(sizes)
    if TOTAL_LABEL in locations or TOTAL_LABEL in sizes:
        raise ValueError(f"'{TOTAL_LABEL}' is reserved for the totals row and column")
    grid = normalize_matrix(matrix, locations, sizes)

    df = pd.DataFrame.from_dict(grid, orient="index", columns=sizes).reindex(locations)
    df = df.fillna(0).astype(int)
    df[TOTAL_LABEL] = df[sizes].sum(axis=1)
    df.loc[TOTAL_LABEL] = df.sum(axis=0)
    df = df.astype(int)
    df.index.name = "location"
    return df


def variance_frame(
    allocation: Optional[Mapping],
    scanned: Optional[Mapping],
    locations: Iterable[str],
    sizes: Iterable[str],
) -> pd.DataFrame:
    """Long-format rows for every cell where scanned differs from allocated."""
    locations = list(locations)
    sizes = list(sizes)
    alloc = normalize_matrix(allocation, locations, sizes)
    scan = normalize_matrix(scanned, locations, sizes)

    df = pd.DataFrame([
        {
            "location": loc,
            "size": s,
            "allocated": alloc[loc][s],
            "scanned": scan[loc][s],
        }
        for loc in locations
        for s in sizes
    ], columns=["location", "size", "allocated", "scanned"])
    df["diff"] = df["scanned"] - df["allocated"]
    return df[df["diff"] != 0].reset_index(drop=True)


def allocation_csv(
    matrix: Optional[Mapping], locations: Iterable[str], sizes: Iterable[str]
) -> str:
    return allocation_frame(matrix, locations, sizes).to_csv()
