from __future__ import annotations

from typing import Any

import pandas as pd

"""Sheet grid normalization.

The Sheets API returns `values` as a ragged list of lists: trailing empty cells
are dropped, fully empty trailing rows are dropped, and numbers may come back
as numbers depending on the render option. Everything downstream works on a
`Sheet` of strings where row 0 is the header.

- normalize_values: API payload -> Sheet (cells as str, None -> "")
- pad_row: right-pad a record to the header width (never truncates)
- to_frame: Sheet -> DataFrame with header columns (CLI inspection)
"""

Sheet = list[list[str]]

__all__ = [
    "Sheet",
    "normalize_values",
    "pad_row",
    "to_frame",
]


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_values(values: Any) -> Sheet:
    """Turn an API `values` payload into a Sheet of strings.

    A missing or non-list payload is an empty sheet. Non-list rows (should not
    happen with the v4 API) become empty rows so absolute indices stay aligned
    with the spreadsheet.
    """
    if not isinstance(values, list):
        return []
    sheet: Sheet = []
    for raw in values:
        if not isinstance(raw, list):
            sheet.append([])
            continue
        sheet.append([_cell_to_str(v) for v in raw])
    return sheet


def pad_row(row: list[str], width: int) -> list[str]:
    if len(row) >= width:
        return list(row)
    return list(row) + [""] * (width - len(row))


def to_frame(sheet: Sheet) -> pd.DataFrame:
    """Build a DataFrame from a Sheet using row 0 as the header.

    Short records are padded with "". Records wider than the header get
    synthetic `col_<n>` column names for the extra cells.
    """
    if not sheet:
        return pd.DataFrame()
    header = list(sheet[0])
    records = sheet[1:]
    width = max([len(header)] + [len(r) for r in records])
    columns = header + [f"col_{i}" for i in range(len(header), width)]
    data = [pad_row(r, width) for r in records]
    return pd.DataFrame(data, columns=columns, dtype="string")
