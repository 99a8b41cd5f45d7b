"""
Year ranges typed into the date-issued browse, e.g. "2020-2025" or "2020 – 2025".
"""

import re

from dspace_client.datasource.models import DateRange
from dspace_client.services.errors import InvalidInputError

DATE_FIELD = "dateIssued"

_RANGE_RE = re.compile(r"^([0-9]{4})\s*[-–]\s*([0-9]{4})$")


def is_date_range(value: object) -> bool:
    return isinstance(value, str) and bool(_RANGE_RE.match(value.strip()))


def parse_date_range(value: object) -> DateRange | None:
    """
    Parse "YYYY-YYYY" (hyphen or en dash, optional spaces) into a DateRange.

    Years are kept in the order given; "2025-2020" yields start_year=2025.
    Returns None when the value is not a range.
    """
    if not isinstance(value, str):
        return None
    match = _RANGE_RE.match(value.strip())
    if match is None:
        return None
    return DateRange(start_year=int(match.group(1)), end_year=int(match.group(2)))


def require_date_range(value: object) -> DateRange:
    date_range = parse_date_range(value)
    if date_range is None:
        raise InvalidInputError(f"Not a year range: {value!r}")
    return date_range


def range_filter(date_range: DateRange, field: str = DATE_FIELD) -> tuple[str, str]:
    """(facet, value) pair selecting ``field`` between both years, inclusive."""
    return field, f"[{date_range.start_year} TO {date_range.end_year}]"
