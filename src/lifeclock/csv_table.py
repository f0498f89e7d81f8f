"""
lifeclock/csv_table.py - Lightweight Table Parser

Turns a header row plus newline-delimited, comma-separated rows into a list
of records (one dict per row, keyed by header).

Parsing Rules:
- No quoting or escaping: fields are assumed free of embedded commas
- Fields that parse as a finite or infinite number become int/float
- Empty or missing fields become None
- Blank lines are NOT skipped: they yield a record whose fields are all None
  (pandas.read_csv would drop them, so callers filter if needed)

Author: LifeClock Project
License: MIT
"""

import math
from typing import Any, Dict, List, Optional, Union

Record = Dict[str, Any]


def coerce_field(value: Optional[str]) -> Union[int, float, str, None]:
    """
    Convert a raw field to a number where possible.

    Args:
        value: Raw (already trimmed) field text, or None if the row was short

    Returns:
        None for empty/missing, int or float for numeric text, else the text
    """
    if value is None or value == '':
        return None

    # Python accepts digit separators that a plain number parser would not
    if '_' in value:
        return value

    try:
        return int(value)
    except ValueError:
        pass

    try:
        number = float(value)
    except ValueError:
        return value

    if math.isnan(number):
        return value
    return number


def parse_table(text: str) -> List[Record]:
    """
    Parse header + rows text into a list of records.

    Args:
        text: Table text; leading/trailing whitespace is ignored

    Returns:
        One record per line after the header (blank lines included)
    """
    lines = text.strip().split('\n')
    headers = [h.strip() for h in lines[0].split(',')]

    records: List[Record] = []
    for line in lines[1:]:
        values = [v.strip() for v in line.split(',')]
        record: Record = {}
        for index, header in enumerate(headers):
            raw = values[index] if index < len(values) else None
            record[header] = coerce_field(raw)
        records.append(record)

    return records
