"""Per-muscle fatigue from RPE overshoot, rebuilt from inputs on every call."""
