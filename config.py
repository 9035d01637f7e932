"""
Runtime configuration

Values come from environment variables, optionally loaded from a .env file.
"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file (if present)
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")
FALLBACK_DATABASE_NAME = os.getenv("FALLBACK_DATABASE_NAME", "fitness_check")

GOOGLE_FIT_ACCESS_TOKEN = os.getenv("GOOGLE_FIT_ACCESS_TOKEN")
GOOGLE_FIT_BASE_URL = os.getenv(
    "GOOGLE_FIT_BASE_URL", "https://www.googleapis.com/fitness/v1/users/me"
)
GOOGLE_FIT_TIMEOUT = float(os.getenv("GOOGLE_FIT_TIMEOUT", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
