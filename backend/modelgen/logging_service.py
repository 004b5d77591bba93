"""
Structured logging service — per-category log directories, daily rotation,
configurable minimum level, structured metadata.

Directory layout:
  backend/data/logs/
    system/system-YYYY-MM-DD.jsonl
    translation/translation-YYYY-MM-DD.jsonl
    plugin/plugin-YYYY-MM-DD.jsonl

The translation core never calls into this module on the request path; the
HTTP controller, the CLI and plugin discovery do.
"""
from __future__ import annotations
import json
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Literal

from .config import LOGS_DIR as LOG_DIR
from .config import LOG_LEVEL, LOG_RETENTION_DAYS
from .constants import LOG_CATEGORIES

# ─── Configuration ──────────────────────────────────────────────────────────

Category = Literal["system", "translation", "plugin"]
Level = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

_LEVEL_ORDER = {"DEBUG": 0, "INFO": 1, "WARNING": 2, "ERROR": 3}

# Runtime-configurable minimum level
_min_level: str = LOG_LEVEL
_lock = threading.Lock()


def set_min_level(level: str) -> None:
    """Set the minimum log level at runtime."""
    global _min_level
    _min_level = level.upper()


def get_min_level() -> str:
    return _min_level


# ─── Category directories ───────────────────────────────────────────────────

def _category_dir(category: str) -> Path:
    d = LOG_DIR / category
    d.mkdir(parents=True, exist_ok=True)
    return d


def _daily_file(category: str, date: datetime | None = None) -> Path:
    """Return the daily log file for a category."""
    dt = date or datetime.utcnow()
    day_str = dt.strftime("%Y-%m-%d")
    return _category_dir(category) / f"{category}-{day_str}.jsonl"


# ─── Core log function ──────────────────────────────────────────────────────

def log(
    category: Category,
    level: Level,
    message: str,
    data: dict | None = None,
    *,
    component: str | None = None,
) -> dict:
    """
    Write a structured log entry.

    Returns the entry that was written, or an empty dict when the level gate
    filtered it out.
    """
    if _LEVEL_ORDER.get(level, 1) < _LEVEL_ORDER.get(_min_level, 1):
        return {}

    entry = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "category": category,
        "level": level,
        "message": message,
        "data": data or {},
    }
    if component:
        entry["component"] = component

    line = json.dumps(entry, default=str) + "\n"

    with _lock:
        with open(_daily_file(category), "a") as f:
            f.write(line)

    return entry


# ─── Query / Read ────────────────────────────────────────────────────────────

def get_logs(
    category: str | None = None,
    level: str | None = None,
    limit: int = 100,
    offset: int = 0,
    *,
    component: str | None = None,
    days: int = 7,
) -> list[dict]:
    """
    Read structured log entries with filters, most recent first.

    Params:
        category: filter by category (None = all)
        level: filter by exact level
        limit: max entries to return
        offset: skip first N matching entries
        component: filter by component field
        days: how many days of log files to scan (default 7)
    """
    now = datetime.utcnow()
    files_to_scan: list[Path] = []
    cats_to_scan = [category] if (category and category in LOG_CATEGORIES) else list(LOG_CATEGORIES)
    for cat in cats_to_scan:
        for d in range(days):
            f = _daily_file(cat, now - timedelta(days=d))
            if f.exists():
                files_to_scan.append(f)

    entries: list[dict] = []
    for fp in files_to_scan:
        with open(fp) as f:
            for raw_line in f:
                raw_line = raw_line.strip()
                if not raw_line:
                    continue
                try:
                    entry = json.loads(raw_line)
                except json.JSONDecodeError:
                    continue

                if level and entry.get("level") != level:
                    continue
                if component and entry.get("component") != component:
                    continue
                entries.append(entry)

    entries.sort(key=lambda e: e.get("timestamp", ""), reverse=True)

    return entries[offset: offset + limit]


# ─── Clear ───────────────────────────────────────────────────────────────────

def clear_logs() -> int:
    """Clear all logs across all categories. Returns total entries deleted."""
    count = 0
    for cat in LOG_CATEGORIES:
        cat_dir = LOG_DIR / cat
        if not cat_dir.is_dir():
            continue
        for fp in cat_dir.glob("*.jsonl"):
            with open(fp) as f:
                count += sum(1 for _ in f)
            fp.unlink()
    return count


def cleanup_old_logs(retention_days: int | None = None) -> int:
    """Delete daily log files older than the retention window. Returns files deleted."""
    days = LOG_RETENTION_DAYS if retention_days is None else retention_days
    if days <= 0:
        return 0

    cutoff = (datetime.utcnow() - timedelta(days=days)).strftime("%Y-%m-%d")
    deleted = 0
    for cat in LOG_CATEGORIES:
        cat_dir = LOG_DIR / cat
        if not cat_dir.is_dir():
            continue
        for fp in cat_dir.glob(f"{cat}-*.jsonl"):
            # "<category>-YYYY-MM-DD"
            file_date = fp.stem[len(cat) + 1:]
            if file_date < cutoff:
                fp.unlink(missing_ok=True)
                deleted += 1
    return deleted
