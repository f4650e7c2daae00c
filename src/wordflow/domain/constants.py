"""Centralized constants for the wordflow application.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- FSRS model ----------
# FSRS-4.5 default weight vector (w0..w16).
DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.4872,
    1.4003,
    3.7145,
    13.8206,
    5.1618,
    1.2298,
    0.8975,
    0.031,
    1.6474,
    0.1367,
    1.0461,
    2.1072,
    0.0793,
    0.3246,
    1.587,
    0.2272,
    2.8755,
)
WEIGHT_COUNT = 17

DECAY = -0.5
FACTOR = 0.9 ** (1 / DECAY) - 1  # 19/81, so that R(S, S) == 0.9

DEFAULT_REQUEST_RETENTION = 0.9
DEFAULT_MINIMUM_INTERVAL = 1  # days
DEFAULT_MAXIMUM_INTERVAL = 36500  # days

MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
MIN_STABILITY = 0.1
LAPSE_STABILITY_CAP = 0.9  # a lapse keeps at most this share of the prior stability

# ---------- Learning steps (minutes) ----------
NEW_AGAIN_STEP = 1
NEW_HARD_STEP = 5
NEW_GOOD_STEP = 10
RELEARN_AGAIN_STEP = 5
RELEARN_HARD_STEP = 10

# ---------- Sessions ----------
DEFAULT_MAX_REVIEWS = 50
DEFAULT_NEW_CARDS_PER_DAY = 20

# ---------- Learning Insights ----------
WEAK_STABILITY_THRESHOLD = 7.0
WEAK_LAPSE_THRESHOLD = 1
WEAK_RETRIEVABILITY_THRESHOLD = 0.7

# ---------- Notebook storage ----------
DEFAULT_NOTEBOOK = "default"
NOTEBOOK_SUFFIX = ".yaml"
