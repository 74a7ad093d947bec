"""Pytest configuration. Puts the project root and test helpers on sys.path and provides an in-memory store."""
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

_root: Path = Path(__file__).resolve().parent.parent
_tests: Path = Path(__file__).resolve().parent
for _path in (_root, _tests):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from gh_importer.db import create_schema  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = Session()
    yield session
    session.close()
