"""
Stat Module - Black Box Interface

Purpose: Decode the whitespace-aligned tables printed by the CLI stat command
Interface: parse_rows(), check_row_count(), RowStat
Hidden: column layouts, field splitting

Row and column counts must match the caller's expectation exactly.
"""

from .table import DEFAULT_COLUMN_COUNT, RowStat, check_row_count, parse_rows

__all__ = ["DEFAULT_COLUMN_COUNT", "RowStat", "check_row_count", "parse_rows"]
