"""Pure transforms from raw session history into per-exercise sets and per-session series."""
