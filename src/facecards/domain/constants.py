"""Centralized constants for facecards.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Directory / HTTP ----------
DEFAULT_DIRECTORY_URL = "https://www.recurse.com/api/v1/profiles"
DEFAULT_DIRECTORY_SCOPE = "current"
DIRECTORY_PAGE_SIZE = 50
REQUEST_TIMEOUT = 30.0
CACHE_DURATION = 3600  # seconds

# ---------- State records ----------
CARDS_RECORD = "cards"
CONFUSION_RECORD = "confusion"
ACTIVE_CHALLENGE_RECORD = "active_challenge"
STREAK_RECORD = "streak"

# ---------- FSRS ----------
DESIRED_RETENTION = 0.9
RELEARN_MINUTES = 1.0
LEARNING_FLOOR_MINUTES = 10.0
MAX_INTERVAL_DAYS = 365.0
GRADUATION_THRESHOLD_DAYS = 1.0
FSRS_MIN_DIFFICULTY = 1.0
FSRS_MAX_DIFFICULTY = 10.0

# ---------- Distractors ----------
# (difficulty upper bound, grade); anything at or above the last bound is grade 1.
DIFFICULTY_GRADES = [(3.0, 4), (5.0, 3), (7.0, 2)]
LOWEST_GRADE = 1
MIN_CANDIDATES = 2
MAX_CHOICE_KEYS = 8
MIN_USABLE_PEOPLE = 2

# ---------- Streak ----------
STREAK_NAMES = {
    10: "MATCHING SPREE",
    25: "WICKED",
    50: "OCT-TASTIC",
    75: "R-R-R-RECURSIVE",
    100: "GODLIKE",
}
STREAK_COLORS = [(20, "#dc3545"), (10, "#ffc107"), (0, "#28a745")]
STREAK_SHAKE_STEP = 5
STREAK_MAX_SHAKE = 5

# ---------- UI ----------
ADVANCE_DELAY = 0.4  # seconds
