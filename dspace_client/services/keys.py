"""
Deterministic cache keys for endpoint + parameter combinations.
"""

import hashlib
import json
from collections.abc import Mapping, Set
from typing import Any

MAX_KEY_LENGTH = 200


def _normalize(value: Any) -> Any:
    """Turn params into a JSON-friendly structure with a stable ordering."""
    if isinstance(value, Mapping):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, Set):
        return sorted((_normalize(v) for v in value), key=repr)
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def canonical_params(params: Mapping[str, Any] | str | None) -> str:
    """Serialize params so that key order never changes the result."""
    if params is None:
        return ""
    if isinstance(params, str):
        return params
    return json.dumps(
        _normalize(params),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def generate_key(endpoint: str, params: Mapping[str, Any] | str | None = None) -> str:
    """
    Generate a cache key from an endpoint name and its parameters.

    Two logically equal parameter sets always produce the same key.
    Long keys are replaced by a sha256 digest of the canonical form.
    """
    full_key = f"{endpoint}:{canonical_params(params)}"

    if len(full_key) > MAX_KEY_LENGTH:
        digest = hashlib.sha256(full_key.encode()).hexdigest()
        return f"{endpoint}:{digest}"

    return full_key
