import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

# "json" for log aggregation, "console" for local development
LOG_FORMAT = os.getenv("LOG_FORMAT", "console" if DEBUG else "json").lower()
SERVICE_NAME = os.getenv("SERVICE_NAME", "rental-reservations")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "rentals"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Upper bound for a single lifecycle operation (PostgreSQL statement_timeout)
OPERATION_TIMEOUT_MS = int(os.getenv("OPERATION_TIMEOUT_MS", "5000"))

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "200"))
