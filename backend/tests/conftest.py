"""Point the app at a throwaway sqlite file and rebuild the schema for every test."""
from __future__ import annotations
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="skatehubba-tests-")
_DB_FILE = os.path.join(_TMP, "test.db")
# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
import structlog
from sqlalchemy import create_engine

from app.db import Base
import app.models.user  # noqa: F401  register tables
import app.models.challenge  # noqa: F401
import app.models.submission  # noqa: F401
import app.models.review  # noqa: F401
import app.models.game  # noqa: F401
import app.models.mail  # noqa: F401

_sync_engine = create_engine(f"sqlite:///{_DB_FILE}")


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(_sync_engine)
    Base.metadata.create_all(_sync_engine)
    yield


@pytest.fixture(autouse=True)
def _clear_log_context():
    structlog.contextvars.clear_contextvars()
    yield
