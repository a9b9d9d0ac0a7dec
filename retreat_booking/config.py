import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

# Optional Postgres schema for all tables (unset for SQLite)
SCHEMA = os.getenv("DB_SCHEMA") or None

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Loyalty program: one point per LOYALTY_SPEND_PER_POINT currency units spent
LOYALTY_SPEND_PER_POINT = Decimal(os.getenv("LOYALTY_SPEND_PER_POINT", "10"))
REVIEW_BONUS_POINTS = int(os.getenv("REVIEW_BONUS_POINTS", "50"))
REVIEW_BONUS_MIN_RATING = int(os.getenv("REVIEW_BONUS_MIN_RATING", "4"))

DEFAULT_STAFF_MEMBER = os.getenv("DEFAULT_STAFF_MEMBER", "System")
