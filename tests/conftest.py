"""
Main fixtures for the Excel Bridge API tests
"""
import sys
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add the project path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.main import app
from src.database import Base, enable_sqlite_foreign_keys, get_db
from src.core.base_repository import EntityRepository
from src.core.settings import ExcelSettings
from src.services.excel.excel_service import ExcelService


# ============================================================================
# Database Test Setup
# ============================================================================

# In-memory SQLite for the tests
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

enable_sqlite_foreign_keys(test_engine)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Isolated database session for each test.
    Tables are dropped at the end of the test.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()

    try:
        yield session
        session.rollback()
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


def override_get_db():
    """Override for the get_db dependency"""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def excel_settings() -> ExcelSettings:
    """Default layout, ignoring any local .env file"""
    return ExcelSettings(_env_file=None)


@pytest.fixture
def repository(db_session: Session) -> EntityRepository:
    return EntityRepository(db_session)


@pytest.fixture
def excel_service(repository: EntityRepository, excel_settings: ExcelSettings) -> ExcelService:
    return ExcelService(repository, excel_settings)


# ============================================================================
# App Fixture with Overrides
# ============================================================================

@pytest.fixture(scope="function")
def test_app(db_session: Session):
    """
    FastAPI app bound to the test database.
    """
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


# ============================================================================
# HTTP Clients
# ============================================================================

@pytest.fixture
def client(test_app) -> TestClient:
    """Synchronous HTTP client for simple tests"""
    return TestClient(test_app)


@pytest_asyncio.fixture
async def async_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Asynchronous HTTP client"""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
