"""
Canonical serialization for deterministic comparison.

Commands, effects and models are frozen dataclasses. Logging them, hashing
them or comparing them across runs goes through these functions so that the
output is identical regardless of dict ordering or container type.
"""

import dataclasses
import enum
import json
from typing import Any

from pydantic import BaseModel


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested values to canonical JSON-compatible form.

    Rules:
    - dict keys sorted (stringified)
    - tuples, lists and frozensets converted to lists (sets sorted)
    - dataclasses become {"type": ClassName, **fields}
    - enums become their value, pydantic models their dumped dict
    - classes become their name
    """
    if isinstance(obj, dict):
        return {_key(k): canonicalize(obj[k]) for k in sorted(obj.keys(), key=_key)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((canonicalize(x) for x in obj), key=str)
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, BaseModel):
        return canonicalize(obj.model_dump(mode="json"))
    if isinstance(obj, type):
        return obj.__name__
    if dataclasses.is_dataclass(obj):
        data = {"type": type(obj).__name__}
        for f in dataclasses.fields(obj):
            data[f.name] = canonicalize(getattr(obj, f.name))
        return canonicalize(data)
    return obj


def _key(k: Any) -> str:
    if isinstance(k, enum.Enum):
        return str(k.value)
    return str(k)


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Deterministic JSON bytes.

    Returns:
        UTF-8 encoded JSON bytes without whitespace, keys sorted
    """
    canon = canonicalize(obj)
    s = json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return s.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    """
    Deterministic JSON string (for logs and test comparison).

    Same guarantees as canonical_json_bytes but returns string.
    """
    return canonical_json_bytes(obj).decode("utf-8")
