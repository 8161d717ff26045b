"""Enumerations and physiological constants for the intelligence engine.

All thresholds and constants cite their published research source.
"""

from enum import Enum, IntEnum, auto


class BasedOn(str, Enum):
    """Which evidence path produced a weight recommendation."""

    HISTORICAL = "historical"
    RPE_ADJUSTMENT = "rpe_adjustment"
    PERCENTAGE_1RM = "percentage_1rm"


class Confidence(IntEnum):
    """Ordered confidence label: LOW < MEDIUM < HIGH."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class FatigueSeverity(IntEnum):
    """Fatigue alert severity, ordered mild < moderate < high < critical."""

    MILD = 1
    MODERATE = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()


class ACWRStatus(str, Enum):
    """Acute:chronic workload band, Gabbett (2016)."""

    UNDERTRAINED = "undertrained"
    OPTIMAL = "optimal"
    CAUTION = "caution"
    HIGH_RISK = "high_risk"
    UNKNOWN = "unknown"


class ReadinessStatus(str, Enum):
    """Overall pre-session readiness classification."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class RecoveryStatus(str, Enum):
    """Per-muscle recovery classification."""

    READY = "ready"
    RECOVERING = "recovering"
    FATIGUED = "fatigued"


class ExerciseType(str, Enum):
    """Catalog exercise classification."""

    COMPOUND = "compound"
    ISOLATION = "isolation"


class WeightUnit(str, Enum):
    """Tracked unit for a logged or suggested weight."""

    LBS = "lbs"
    KG = "kg"


class SignalPriority(IntEnum):
    """Readiness signal tiers; lower value = evaluated and reported first."""

    SAFETY = 0
    RECOVERY = 1
    PERFORMANCE = 2


class AdjustmentOption(IntEnum):
    """Alternative responses offered alongside a fatigue alert."""

    REDUCE_WEIGHT = auto()
    REDUCE_REPS = auto()
    INCREASE_REST = auto()
    SKIP_EXERCISE = auto()


# ---------------------------------------------------------------------------
# Strength constants
# ---------------------------------------------------------------------------

# Epley (1985) estimated one-rep max: w × (1 + reps / 30)
EPLEY_DIVISOR = 30.0

# Smallest practical plate increment, in the tracked unit
WEIGHT_INCREMENT = 0.5

LBS_PER_KG = 2.20462

# Historical progression step when last RPE misses target by > 1 (Helms et al., 2018)
RPE_PROGRESSION_STEP_PCT = 0.025
RPE_PROGRESSION_TOLERANCE = 1.0

# Fallback reference when the exercise has no own history: share of the most
# recent weight used on any exercise
CROSS_EXERCISE_REFERENCE_FRACTION = 0.80

# Rep target used when the requested one is missing or not a number
DEFAULT_TARGET_REPS = 5

# ---------------------------------------------------------------------------
# ACWR thresholds: Gabbett (2016), Br J Sports Med 50(5):273-280
# ---------------------------------------------------------------------------
ACWR_OPTIMAL_LOW = 0.8  # Below this = undertrained
ACWR_OPTIMAL_HIGH = 1.3  # Upper bound of "sweet spot" (inclusive)
ACWR_DANGER_THRESHOLD = 1.5  # Above this = high injury risk
ACWR_ACUTE_DAYS = 7
ACWR_CHRONIC_DAYS = 28

# EWMA spans for the supplementary ACWR: Williams et al. (2017)
EWMA_ACUTE_SPAN = 7
EWMA_CHRONIC_SPAN = 28

# Training monotony warning: Foster (1998), Med Sci Sports Exerc 30(7)
MONOTONY_WARNING_THRESHOLD = 2.0

# ---------------------------------------------------------------------------
# Recovery curves: hours to ~95% recovery per muscle group
# Schoenfeld et al. (2016) frequency meta-analysis; Bishop et al. (2008)
# ---------------------------------------------------------------------------
RECOVERY_HOURS: dict[str, float] = {
    "chest": 48.0,
    "back": 48.0,
    "upper back": 48.0,
    "lower back": 72.0,
    "shoulders": 36.0,
    "front delts": 36.0,
    "rear delts": 36.0,
    "triceps": 36.0,
    "biceps": 36.0,
    "forearms": 24.0,
    "abs": 24.0,
    "quads": 72.0,
    "hamstrings": 72.0,
    "glutes": 72.0,
    "calves": 24.0,
}
DEFAULT_RECOVERY_HOURS = 48.0

# exp(-k) = 0.05  ⇒  k ≈ 2.996, so recovery reaches 95% at the curve's hours
RECOVERY_RATE_CONSTANT = 2.996
COMPOUND_RECOVERY_MULTIPLIER = 1.2
ISOLATION_RECOVERY_MULTIPLIER = 0.8

# Readiness (0-10) bands for a muscle
MUSCLE_READY_SCORE = 8.0
MUSCLE_RECOVERING_SCORE = 6.0

# ---------------------------------------------------------------------------
# Fatigue model: Zourdos et al. (2016), Helms et al. (2018)
# ---------------------------------------------------------------------------
FATIGUE_SET_SCALE = 12.0
FATIGUE_OVERSHOOT_WEIGHT = 3.0
FATIGUE_FAILURE_MULTIPLIER = 1.4
FATIGUE_FORM_BREAKDOWN_MULTIPLIER = 1.5
FATIGUE_LEVEL_CAP = 100.0
FATIGUE_MIN_INTERFERENCE = 0.1
FATIGUE_REFERENCE_REPS = 8.0
FATIGUE_REFERENCE_LOAD_LBS = 150.0
FATIGUE_DEFAULT_RPE = 7.0
FATIGUE_DEFAULT_REPS = 5
AFFECTED_MUSCLE_MIN_LEVEL = 10.0
AFFECTED_MUSCLE_LIMIT = 3

# An RPE overshoot of at least half a point marks an "overshoot set"
OVERSHOOT_SET_THRESHOLD = 0.5

# Session fatigue scalar (0-100): volume points per 1000 lbs (capped), points
# per RPE of mean overshoot, and flat points per flagged set
SESSION_VOLUME_POINTS_PER_1000_LBS = 1.0
SESSION_VOLUME_POINTS_CAP = 40.0
SESSION_OVERSHOOT_POINTS_PER_RPE = 10.0
SESSION_FORM_BREAKDOWN_POINTS = 10.0
SESSION_FAILURE_POINTS = 15.0
# Failure on a set targeted at or below this RPE was not intended
UNINTENTIONAL_FAILURE_MAX_RPE = 7.0
# Sets needed before the session assessment is fully confident
SESSION_FULL_CONFIDENCE_SETS = 5

SEVERITY_REDUCTION: dict[FatigueSeverity, float] = {
    FatigueSeverity.MILD: 0.05,
    FatigueSeverity.MODERATE: 0.10,
    FatigueSeverity.HIGH: 0.15,
    FatigueSeverity.CRITICAL: 0.20,
}
REDUCTION_PER_RPE_OVERSHOOT = 0.05
MAX_REDUCTION = 0.25

SEVERITY_CONFIDENCE: dict[FatigueSeverity, float] = {
    FatigueSeverity.MILD: 0.60,
    FatigueSeverity.MODERATE: 0.75,
    FatigueSeverity.HIGH: 0.85,
    FatigueSeverity.CRITICAL: 0.95,
}

SEVERITY_BASIS: dict[FatigueSeverity, str] = {
    FatigueSeverity.MILD: (
        "RPE-based autoregulation: small, repeated overshoots indicate the "
        "prescribed load slightly exceeds daily capacity (Helms et al., 2018)."
    ),
    FatigueSeverity.MODERATE: (
        "RIR-based RPE scale: a 1.5+ RPE overshoot corresponds to a loss of "
        "roughly two reps in reserve (Zourdos et al., 2016)."
    ),
    FatigueSeverity.HIGH: (
        "Repeated high-RPE sets accumulate peripheral fatigue that reduces "
        "subsequent set performance (Richens & Cleather, 2014)."
    ),
    FatigueSeverity.CRITICAL: (
        "Sustained large RPE overshoot signals acute neuromuscular fatigue; "
        "load reductions of about 20% restore target effort (Zourdos et al., 2016)."
    ),
}

# Extra rest offered with high/critical alerts, seconds
EXTRA_REST_SECONDS = 90

# RPE calibration: deviation that counts as a miscalibrated set
CALIBRATION_DEVIATION = 2.0
CALIBRATION_MIN_SETS = 2
CALIBRATION_DECREASE_PER_RPE = 0.05
CALIBRATION_MAX_DECREASE = 0.15
CALIBRATION_INCREASE_PER_RPE = 0.04
CALIBRATION_MAX_INCREASE = 0.10

# ---------------------------------------------------------------------------
# Readiness blend
# ---------------------------------------------------------------------------
READINESS_WEIGHTS: dict[str, float] = {
    "acwr": 0.4,
    "muscle_recovery": 0.4,
    "performance_trend": 0.2,
}
READINESS_HIGH_THRESHOLD = 7.5
READINESS_MODERATE_THRESHOLD = 5.0
READINESS_NEUTRAL_SCORE = 7.0
READINESS_FALLBACK_SCORE = 6.5
READINESS_FULL_HISTORY_SESSIONS = 10
TREND_WINDOW_SESSIONS = 8
TREND_MIN_SESSIONS = 3

# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------
SIGNIFICANCE_LEVEL = 0.05
MIN_DID_SESSIONS = 20
MIN_DID_HALF = 5
MIN_PSM_GROUP = 3
MIN_IV_OBSERVATIONS = 15
WEAK_INSTRUMENT_F = 10.0
PSM_CALIPER_SD = 0.2
PSM_RIDGE_PENALTY = 1e-2
DOMINANT_MEDIATION_SHARE = 0.5
