"""
Tests for the structured JSON-lines logging service.

Run from the repository root:
    python -m pytest backend/tests/test_logging.py -v
"""
from __future__ import annotations

from modelgen import logging_service as logger
from modelgen.config import LOGS_DIR


class TestLoggingService:

    def setup_method(self):
        self._level = logger.get_min_level()
        logger.clear_logs()

    def teardown_method(self):
        logger.set_min_level(self._level)

    def test_entry_written_to_category_file(self):
        entry = logger.log("translation", "INFO", "Graph translated", {"layers": 2}, component="test")
        assert entry["category"] == "translation"
        assert entry["component"] == "test"
        files = list((LOGS_DIR / "translation").glob("translation-*.jsonl"))
        assert len(files) == 1

    def test_read_back(self):
        logger.log("plugin", "INFO", "first")
        logger.log("plugin", "INFO", "second")
        messages = [e["message"] for e in logger.get_logs(category="plugin")]
        assert set(messages) == {"first", "second"}

    def test_level_gate(self):
        logger.set_min_level("warning")
        assert logger.get_min_level() == "WARNING"
        assert logger.log("system", "INFO", "dropped") == {}
        assert logger.log("system", "ERROR", "kept")["level"] == "ERROR"
        messages = [e["message"] for e in logger.get_logs(category="system")]
        assert "dropped" not in messages
        assert "kept" in messages

    def test_filters(self):
        logger.log("translation", "WARNING", "rejected", component="cli")
        logger.log("translation", "INFO", "ok", component="controller")
        assert [e["message"] for e in logger.get_logs(level="WARNING")] == ["rejected"]
        assert [e["message"] for e in logger.get_logs(component="controller")] == ["ok"]

    def test_clear(self):
        logger.log("system", "INFO", "a")
        logger.log("plugin", "INFO", "b")
        assert logger.clear_logs() == 2
        assert logger.get_logs() == []

    def test_cleanup_old_files(self):
        old = LOGS_DIR / "system" / "system-2000-01-01.jsonl"
        old.parent.mkdir(parents=True, exist_ok=True)
        old.write_text('{"message": "ancient"}\n')
        logger.log("system", "INFO", "today")
        assert logger.cleanup_old_logs(retention_days=30) == 1
        assert not old.exists()
        assert [e["message"] for e in logger.get_logs(category="system")] == ["today"]

    def test_cleanup_disabled(self):
        assert logger.cleanup_old_logs(retention_days=0) == 0
