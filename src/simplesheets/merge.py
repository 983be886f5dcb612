"""
Merge new data into what's already in a tab.

The existing header always survives.  New rows overwrite existing rows
positionally starting right below the header, existing rows past the end
of the new data are kept as they are, and new rows past the end of the
existing grid are dropped.  Adding rows is what append is for.
"""
from collections.abc import Iterable, Mapping
from typing import Any
import logging

from .convert import Csv, Records, csv_to_grid, to_data

logger = logging.getLogger(__name__)

def project_records(records: Iterable[Mapping], header: list) -> list[list]:
    """
    Lay records out along an existing header.  Keys the header doesn't have
    are ignored, header columns a record doesn't have are empty strings.
    """
    rows = []
    for r in records:
        rows.append([("" if r.get(h) is None else r.get(h)) for h in header])
    return rows

def normalize_rows(new_data: Any, header: list) -> list[list]:
    """
    New data as rows ready to drop in below the header.  CSV and grids are
    taken row for row, records are projected on the header.
    """
    d = to_data(new_data)
    if isinstance(d, Csv):
        return csv_to_grid(d.text)
    if isinstance(d, Records):
        return project_records(d.rows, header)
    return [list(r) for r in d.rows]

def merge(existing_grid: list[list], new_data: Any) -> list[list]:
    """
    Returns a grid the same length as existing_grid with row 0 untouched and
    row i replaced by new row i-1 where there is one.
    An empty existing grid has no header to merge against and gives [].
    """
    existing = [list(r) for r in (existing_grid or [])]
    if not existing:
        return []
    header = existing[0]
    rows = normalize_rows(new_data, header)
    merged = [header]
    for i in range(1, len(existing)):
        merged.append(list(rows[i - 1]) if i <= len(rows) else existing[i])
    if len(rows) > len(existing) - 1:
        logger.debug("Merge dropped rows past the end of the existing data",
                     extra={"dropped_rows": len(rows) - (len(existing) - 1)})
    return merged
