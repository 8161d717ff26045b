"""Training load intelligence: recommendations, fatigue, readiness and causal analytics."""

from load_intelligence.engine import IntelligenceEngine

__all__ = ["IntelligenceEngine"]
