"""Data models for the intelligence engine."""
