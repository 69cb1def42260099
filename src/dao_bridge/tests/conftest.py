"""
Core pytest configuration for the test suite.

Domain-specific fixtures live in:
- tests/test_fixtures/db_fixtures.py   (SQLite engine, session factory, test models)
- tests/test_fixtures/natives.py       (fake driver exceptions, stub low-level translator)

and are imported below so every test module can use them without imports.
"""

from __future__ import annotations

import sys
import logging
from pathlib import Path

# -------------------------------
# Early logging tuning
# -------------------------------
# Keep SQLAlchemy quiet before anything imports it.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "sqlalchemy.pool",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# Ensure 'src' on sys.path so `import dao_bridge...` works without an install
SRC = Path(__file__).resolve().parents[2]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# -------------------------------
# Fixtures
# -------------------------------
from .test_fixtures.db_fixtures import engine, session_factory, author  # noqa: E402,F401
from .test_fixtures.natives import stub_sql_translator  # noqa: E402,F401
