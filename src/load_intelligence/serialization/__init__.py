"""Serialization module: export engine results as plain JSON-compatible data."""

from load_intelligence.serialization.plain import to_dict, to_json_string

__all__ = ["to_dict", "to_json_string"]
