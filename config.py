"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# SCHEDULE
# =============================================================================

# Time zone the schedule's HH:MM cells are written in
SCHEDULE_TIMEZONE = os.environ.get("SCHEDULE_TIMEZONE", "America/Chicago")
OUTPUT_DIR = Path(os.environ.get("OUTPUT_DIR", "output"))
EMAIL_DIRECTORY = os.environ.get("EMAIL_DIRECTORY", "")

# =============================================================================
# EMAIL
# =============================================================================

SMTP_HOST = os.environ.get("SMTP_HOST", "")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
SMTP_USE_TLS = os.environ.get("SMTP_USE_TLS", "true").lower() == "true"

FROM_EMAIL = os.environ.get("FROM_EMAIL", "")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")

# =============================================================================
# APP
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
PORT = int(os.environ.get("PORT", "5001"))
