"""Plain-data serialization for engine results.

Converts any result dataclass into JSON-compatible dicts for the UI layer:
enums become their values (ordered IntEnums their lower-case names),
datetimes become ISO-8601 strings, frozensets become sorted lists, and
tagged variants carry their ``kind`` / ``based_on`` tag.

All functions are pure (no I/O).
"""

from __future__ import annotations

import dataclasses
import json
import math
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any

import numpy as np

_TAG_ATTRIBUTES = ("kind", "based_on")


def to_dict(obj: Any) -> Any:
    """Recursively convert a result object to plain Python data."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data: dict[str, Any] = {}
        for tag in _TAG_ATTRIBUTES:
            if hasattr(type(obj), tag):
                data[tag] = to_dict(getattr(type(obj), tag))
        for f in dataclasses.fields(obj):
            data[f.name] = to_dict(getattr(obj, f.name))
        if "fatigue_alert" not in data and hasattr(obj, "fatigue_alert"):
            data["fatigue_alert"] = to_dict(obj.fatigue_alert)
        return data
    if isinstance(obj, IntEnum):
        return obj.name.lower()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, (frozenset, set)):
        return sorted(to_dict(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    if isinstance(obj, dict):
        return {str(to_dict(k)): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, np.ndarray):
        return [to_dict(v) for v in obj.tolist()]
    if isinstance(obj, np.generic):
        return to_dict(obj.item())
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    return obj


def to_json_string(obj: Any, indent: int = 2) -> str:
    """Serialize a result object to a JSON string."""
    return json.dumps(to_dict(obj), indent=indent)
