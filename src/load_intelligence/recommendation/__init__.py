"""Set-level weight and rep suggestions."""
