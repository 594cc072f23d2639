"""
Parser for stat tables.

The CLI prints one header line followed by one line per resource:

    NAME    MESHED   SUCCESS   RPS     LATENCY_P50   LATENCY_P95   LATENCY_P99   TCP_CONN
    web     1/1      100.00%   2.0rps  1ms           2ms           3ms           2

Some views add a STATUS column right after the name, which shifts every
later column one to the right.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from meshprobe.errors import ColumnCountError, DuplicateRowError, RowCountError

DEFAULT_COLUMN_COUNT = 8


@dataclass
class RowStat:
    """One row of stat output. Values are kept exactly as printed."""

    name: str
    meshed: str
    success: str
    rps: str
    p50_latency: str
    p95_latency: str
    p99_latency: str
    tcp_open_connections: str
    status: Optional[str] = None


# Field index of every RowStat attribute, per column count
BASELINE_LAYOUT = {
    "name": 0,
    "meshed": 1,
    "success": 2,
    "rps": 3,
    "p50_latency": 4,
    "p95_latency": 5,
    "p99_latency": 6,
    "tcp_open_connections": 7,
}

STATUS_LAYOUT = {
    "name": 0,
    "status": 1,
    **{field: index + 1 for field, index in BASELINE_LAYOUT.items() if field != "name"},
}

COLUMN_LAYOUTS = {
    DEFAULT_COLUMN_COUNT: BASELINE_LAYOUT,
    DEFAULT_COLUMN_COUNT + 1: STATUS_LAYOUT,
}


def _layout_for(column_count: int) -> Dict[str, int]:
    if column_count < DEFAULT_COLUMN_COUNT:
        raise ValueError(
            f"Stat output has at least {DEFAULT_COLUMN_COUNT} columns, "
            f"cannot parse with {column_count}"
        )
    return COLUMN_LAYOUTS.get(column_count, BASELINE_LAYOUT)


def check_row_count(out: str, expected_row_count: int) -> List[str]:
    """
    Strip the header and check the number of data rows.

    Args:
        out: Full command output
        expected_row_count: Number of data rows the caller expects

    Returns:
        The data rows, header removed

    Raises:
        RowCountError: Output has no header line, or the row count differs
    """
    if out.endswith("\n"):
        out = out[:-1]
    rows = out.split("\n")

    if len(rows) < 2:
        raise RowCountError(
            f"Error stripping header and trailing newline; full output:\n{out}"
        )

    rows = rows[1:]
    if len(rows) != expected_row_count:
        raise RowCountError(
            f"Expected [{expected_row_count}] rows in stat output, got [{len(rows)}]; "
            f"full output:\n" + "\n".join(rows)
        )

    return rows


def parse_rows(
    out: str,
    expected_row_count: int,
    expected_column_count: int = 0,
    strict: bool = False,
) -> Dict[str, RowStat]:
    """
    Parse stat output into RowStats keyed by resource name.

    Args:
        out: Full command output, header included
        expected_row_count: Number of data rows the caller expects
        expected_column_count: Columns per row; 0 means the default of 8.
            With 9 columns the second one is read as STATUS.
        strict: Reject repeated resource names instead of keeping the last one

    Raises:
        RowCountError: Row count differs from ``expected_row_count``
        ColumnCountError: A row does not have ``expected_column_count`` fields
        DuplicateRowError: ``strict`` is set and a name appears twice
    """
    rows = check_row_count(out, expected_row_count)

    if expected_column_count == 0:
        expected_column_count = DEFAULT_COLUMN_COUNT
    layout = _layout_for(expected_column_count)

    row_stats: Dict[str, RowStat] = {}
    for row in rows:
        fields = row.split()

        if len(fields) != expected_column_count:
            raise ColumnCountError(
                f"Expected [{expected_column_count}] columns in stat output, "
                f"got [{len(fields)}]; full output:\n{row}"
            )

        row_stat = RowStat(**{attr: fields[index] for attr, index in layout.items()})

        if strict and row_stat.name in row_stats:
            raise DuplicateRowError(f"Resource [{row_stat.name}] appears more than once:\n{out}")
        row_stats[row_stat.name] = row_stat

    return row_stats
