"""Runtime configuration for the intelligence engine.

Values come from environment variables with sensible defaults, so a host
application can tune timeouts and sample-size floors without code changes.
"""

from __future__ import annotations

import logging
import os

READINESS_TIMEOUT_S = float(os.environ.get("LOAD_INTEL_READINESS_TIMEOUT_S", "2.5"))
READINESS_CACHE_TTL_S = float(os.environ.get("LOAD_INTEL_READINESS_CACHE_TTL_S", "300"))
MIN_CAUSAL_SESSIONS = int(os.environ.get("LOAD_INTEL_MIN_CAUSAL_SESSIONS", "10"))
FATIGUE_WINDOW_HOURS = float(os.environ.get("LOAD_INTEL_FATIGUE_WINDOW_HOURS", "96"))
BOOTSTRAP_SAMPLES = int(os.environ.get("LOAD_INTEL_BOOTSTRAP_SAMPLES", "500"))
RANDOM_SEED = int(os.environ.get("LOAD_INTEL_RANDOM_SEED", "7"))
LOG_LEVEL = os.environ.get("LOAD_INTEL_LOG_LEVEL", "WARNING")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a basic stream handler for host applications without one."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
