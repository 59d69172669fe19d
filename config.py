# energy_balance_service/config.py
import os

# --- Firebase / Storage ---
SERVICE_ACCOUNT_PATH = os.getenv(
    "SERVICE_ACCOUNT_PATH",
    os.path.join(os.path.dirname(__file__), "service-account.json"),
)
# Local fallback for the persisted day window when running outside Firestore.
DAY_WINDOW_STATE_PATH = os.getenv("DAY_WINDOW_STATE_PATH", "day_window.json")

USERS_COLLECTION = "users"
STATE_COLLECTION = "state"
DAY_WINDOW_DOCUMENT = "dayWindow"
ENERGY_RECORDS_COLLECTION = "energyRecords"
EXERCISE_SESSIONS_COLLECTION = "exerciseSessions"
TELEMETRY_COLLECTION = "energyTelemetry"
ENERGY_BALANCE_COLLECTION = "energyBalance"
MEAL_LOGS_COLLECTION = "mealLogs"

# --- Time ---
MINUTES_PER_DAY = 1440
DEFAULT_TIME_ZONE = "UTC"

# --- Plausibility Guards ---

# Heuristic ceiling for a day's passive energy, as a multiple of daily BMR.
# Values above it are flagged for telemetry, never truncated.
PLAUSIBLE_MAX_BMR_MULTIPLIER = 3.0

# Reconstructed (passive + active + bmrElapsed) / total should land here.
# Sub-minute exercise sessions reporting ~0 kcal can push it outside.
RATIO_LOWER_BOUND = 0.95
RATIO_UPPER_BOUND = 1.05

# --- Mifflin-St Jeor ---
BMR_WEIGHT_COEFFICIENT = 10.0
BMR_HEIGHT_COEFFICIENT = 6.25
BMR_AGE_COEFFICIENT = 5.0
BMR_MALE_OFFSET = 5.0
BMR_FEMALE_OFFSET = -161.0

# --- Profile Validation Ranges ---
MIN_AGE_YEARS = 13
MAX_AGE_YEARS = 120
MIN_WEIGHT_KG = 30.0
MAX_WEIGHT_KG = 300.0
MIN_HEIGHT_CM = 100.0
MAX_HEIGHT_CM = 250.0
