"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from leadflow.core.auth import PortalUser


@pytest.fixture
def test_db_url(tmp_path) -> str:
    """File-backed SQLite database, fresh for every test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'leadflow_api.db'}"


@pytest.fixture
def api_client(test_db_url):
    """FastAPI test client with a test database.

    Initializes the global database via init_db inside the TestClient's
    own event loop so route handlers can use get_session_factory().
    """
    from fastapi import HTTPException
    from fastapi.middleware.cors import CORSMiddleware

    from leadflow.api.routes import api_router
    from leadflow.core.config import get_settings
    from leadflow.db import close_db, init_db
    from leadflow.main import generic_exception_handler, http_exception_handler

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        """Test lifespan - initialize DB in TestClient's event loop."""
        # Reset global so init_db creates a fresh engine in THIS loop
        import leadflow.db.base as db_mod

        db_mod._engine = None
        db_mod._session_factory = None
        await init_db(test_db_url)
        yield
        await close_db()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="LeadFlow Portal - Test Client",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers (needed for debug_id testing)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def user_a():
    """Test user A."""
    return PortalUser(user_id="user_portal_a", claims={"sub": "user_portal_a"})


@pytest.fixture
def user_b():
    """Test user B (different user for isolation testing)."""
    return PortalUser(user_id="user_portal_b", claims={"sub": "user_portal_b"})
