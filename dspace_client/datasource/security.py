"""
Input validation applied before any request leaves the client.
"""

import re

from dspace_client.services.errors import InvalidInputError

MAX_QUERY_LENGTH = 500

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def is_valid_uuid(value: object) -> bool:
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def validate_id(value: object) -> str:
    """Return value if it is a UUID, else raise InvalidInputError."""
    if not is_valid_uuid(value):
        raise InvalidInputError(f"Invalid resource identifier: {value!r}")
    return value  # type: ignore[return-value]


def sanitize_search_query(query: object) -> str:
    """Strip script blocks, control characters and angle brackets; cap length."""
    if not isinstance(query, str):
        return ""
    query = _SCRIPT_RE.sub("", query)
    query = _CONTROL_RE.sub("", query)
    query = query.replace("<", "").replace(">", "")
    return query.strip()[:MAX_QUERY_LENGTH]
