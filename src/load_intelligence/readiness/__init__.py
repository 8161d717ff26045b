"""Pre-session readiness: pluggable signals, weighted blend, async service."""
