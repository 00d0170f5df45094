"""Pytest configuration and fixtures."""

import os

# Must be set before config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("ENV", "dev")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import config
import models  # noqa: F401
from db import Base
from main import app
from models.user import UserRole
from services.folder_watch import notifier
from tests.factories import create_user, make_auth_headers

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def storage_dirs(tmp_path, monkeypatch):
    """Point file storage and the recycle bin at a temporary directory."""
    files_dir = tmp_path / "files"
    bin_dir = tmp_path / "recycle_bin"
    monkeypatch.setattr(config.settings, "FILE_STORAGE_DIR", str(files_dir))
    monkeypatch.setattr(config.settings, "RECYCLE_BIN_DIR", str(bin_dir))
    return files_dir, bin_dir


@pytest.fixture(autouse=True)
def reset_notifier():
    notifier._waiters.clear()
    yield
    notifier._waiters.clear()


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a test database session on a fresh in-memory database."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await test_engine.dispose()


@pytest_asyncio.fixture
async def client(db_session):
    """HTTP client bound to the app, sharing the test session."""
    from api.deps import get_db

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await create_user(db_session, email="admin@takeoffs.com.au", role=UserRole.ADMIN, name="Admin User")


@pytest_asyncio.fixture
async def estimator_user(db_session):
    return await create_user(db_session, email="estimator@takeoffs.com.au", role=UserRole.ESTIMATOR, name="Eve Estimator")


@pytest_asyncio.fixture
async def plain_user(db_session):
    return await create_user(db_session, email="user@takeoffs.com.au", name="Uma User")


@pytest_asyncio.fixture
async def other_user(db_session):
    return await create_user(db_session, email="other@takeoffs.com.au", name="Oscar Other")


@pytest.fixture
def admin_headers(admin_user):
    return make_auth_headers(admin_user)


@pytest.fixture
def user_headers(plain_user):
    return make_auth_headers(plain_user)
