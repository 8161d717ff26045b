"""Readiness signals. Any concrete ReadinessSignal placed in this package is discovered."""
