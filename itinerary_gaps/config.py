"""Configuration: .env loading, detection thresholds, constants."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Project root = parent of itinerary_gaps/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# --- Time gaps (minutes) ---
TIME_GAP_THRESHOLD_MINUTES = 120  # flag gaps longer than this
TIME_GAP_WARNING_MINUTES = 480
GAP_ERROR_MINUTES = 1440  # shared by time and missing-lodging gaps

# --- Missing lodging (minutes) ---
LODGING_GAP_THRESHOLD_MINUTES = 360  # anything longer spans a night
LODGING_GAP_WARNING_MINUTES = 720

# --- Location matching ---
EARTH_RADIUS_KM = 6371.0
SAME_PLACE_RADIUS_KM = float(os.getenv("SAME_PLACE_RADIUS_KM", "50"))

# --- Normalization ---
DEFAULT_TIMEZONE = os.getenv("ITINERARY_DEFAULT_TZ", "UTC")  # applied to naive timestamps
