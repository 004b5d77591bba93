"""
Shared test setup.

Logs go to a throwaway DATA_DIR; config.py reads the environment at import,
so this runs before any modelgen module is imported.
"""
from __future__ import annotations
import os
import sys
import tempfile

# Ensure backend root is on path so modelgen can be imported
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="modelgen-test-")
os.environ["CODE_FORMATTER"] = "none"
os.environ["INCLUDE_IMPORTS"] = "0"
os.environ["LOG_LEVEL"] = "DEBUG"
