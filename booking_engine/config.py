import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "console" if LOG_LEVEL == "DEBUG" else "json").lower()

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Booking holds
HOLD_WINDOW_MINUTES = int(os.getenv("HOLD_WINDOW_MINUTES", "30"))
INSPECTION_DURATION_MINUTES = int(os.getenv("INSPECTION_DURATION_MINUTES", "30"))
MINIMUM_GAP_MINUTES = int(os.getenv("MINIMUM_GAP_MINUTES", "30"))

# Per-property locking
LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))

# Expiry sweeper
SWEEPER_ENABLED = os.getenv("SWEEPER_ENABLED", "true").lower() == "true"
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
SWEEP_BATCH_SIZE = int(os.getenv("SWEEP_BATCH_SIZE", "100"))

# Payment event policy
AUTO_CONFIRM_ON_PAYMENT = os.getenv("AUTO_CONFIRM_ON_PAYMENT", "false").lower() == "true"
AUTO_CANCEL_ON_PAYMENT_FAILURE = (
    os.getenv("AUTO_CANCEL_ON_PAYMENT_FAILURE", "true").lower() == "true"
)
