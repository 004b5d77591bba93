"""
Centralized configuration — all paths, env vars, and settings in one place.

Environment variables:
  - DATA_DIR:           override data root (default: backend/data/)
  - LOG_LEVEL:          minimum log level (default: INFO)
  - LOG_RETENTION_DAYS: auto-cleanup threshold (default: 30)
  - CODE_FORMATTER:     post-translation formatter, "none" or "black" (default: none)
  - INCLUDE_IMPORTS:    prepend plugin imports to API output by default (default: 0)
"""
from __future__ import annotations
import os
from pathlib import Path

# ─── Root directories ────────────────────────────────────────────────────────

# Backend root: <repo>/backend/
BACKEND_ROOT = Path(__file__).parent.parent

# Data root: all persistent data lives here
DATA_DIR = Path(os.environ.get("DATA_DIR", str(BACKEND_ROOT / "data")))

# ─── Data sub-directories ────────────────────────────────────────────────────

LOGS_DIR = DATA_DIR / "logs"
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# ─── Logging ─────────────────────────────────────────────────────────────────

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))

# ─── Translation ─────────────────────────────────────────────────────────────

CODE_FORMATTER = os.environ.get("CODE_FORMATTER", "none").strip().lower()
INCLUDE_IMPORTS = os.environ.get("INCLUDE_IMPORTS", "0").strip().lower() in ("1", "true", "yes")

# Spaces per indentation level in generated Python
INDENT_WIDTH = 4

# ─── CORS ─────────────────────────────────────────────────────────────────────

_DEFAULT_CORS = "http://localhost:5173,http://localhost:5174,http://127.0.0.1:5173,http://127.0.0.1:5174"
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", _DEFAULT_CORS).split(",") if o.strip()
]

# ─── App metadata ────────────────────────────────────────────────────────────

APP_NAME = "Model DESIGNER Translator"
APP_VERSION = "1.0.0"
