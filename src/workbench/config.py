# -----------------------------------------------------------------------------
# Configuration
# Loads .env (if present) and exposes runtime settings as module constants.
# Every value can be overridden through the process environment.
# -----------------------------------------------------------------------------

from __future__ import annotations
import os
from dotenv import load_dotenv

load_dotenv()

# Base URL of the remote formula registry / solver (no trailing /api)
API_URL = os.getenv("API_URL", "http://127.0.0.1:8080").rstrip("/")
API_PREFIX = os.getenv("API_PREFIX", "/api")

# Toast lifecycle: dwell before auto-dismiss, then exit transition
TOAST_DWELL_SECONDS = float(os.getenv("TOAST_DWELL_SECONDS", "5"))
TOAST_EXIT_SECONDS = float(os.getenv("TOAST_EXIT_SECONDS", "0.3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Optional seed file for dev_up.py --seed
SEED_CATALOG_PATH = os.getenv("SEED_CATALOG_PATH", "examples/formulas.yaml")
UI_PORT = int(os.getenv("UI_PORT", "8501"))
