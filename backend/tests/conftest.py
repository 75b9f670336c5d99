"""Pytest fixtures for drafting tests.

Provides reusable test fixtures for:
- In-memory SQLite engine with the sample model graph created
- Database session per test
- A fresh DraftRegistry (and orchestrator) per test
- A persisted Business graph

Usage:
    def test_business_draft(registry, orchestrator, business):
        registry.register(Business)
        draft = orchestrator.create_draft(business)
"""

import sys
import os
from pathlib import Path
from typing import Generator

# Keep settings deterministic regardless of the developer's .env
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))
sys.path.insert(0, str(Path(__file__).parent))

from config import Settings
from database import build_engine
from draftflow import DraftOrchestrator, DraftRegistry, SqlAlchemySchema
from fixtures.business_graph import Base, Business, build_business


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with all sample tables created."""
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def settings() -> Settings:
    return Settings(DRAFT_TIMESTAMP_COLUMNS=["created_at"], DRAFT_DEFAULT_NULLIFY=[])


@pytest.fixture(scope="function")
def registry(engine: Engine, settings: Settings) -> Generator[DraftRegistry, None, None]:
    """Independent registry per test; disposed so no session listener leaks."""
    draft_registry = DraftRegistry(schema=SqlAlchemySchema(bind=engine), settings=settings)
    try:
        yield draft_registry
    finally:
        draft_registry.dispose()


@pytest.fixture(scope="function")
def orchestrator(registry: DraftRegistry) -> DraftOrchestrator:
    return DraftOrchestrator(registry)


@pytest.fixture(scope="function")
def business(db_session: Session) -> Business:
    """Persisted Business with 3 employees, 1 address, 2 images, 1 vending machine."""
    return build_business(db_session)
