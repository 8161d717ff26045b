"""Mapping of raw persistence-layer records into immutable engine records."""

from load_intelligence.ingest.record_mapper import (
    map_catalog,
    map_history,
    map_session,
    map_set,
    map_user_maxes,
)

__all__ = ["map_catalog", "map_history", "map_session", "map_set", "map_user_maxes"]
