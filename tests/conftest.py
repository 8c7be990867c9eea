"""Root conftest — test infrastructure for all backend tests.

Provides:
- Mocked database session and fresh event bus fixtures
- Admin fixtures (regular admin and super-admin)
- API client with dependency overrides (no JWT, no database)
- Autouse reset of process-wide caches between tests
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.events import ContentEventBus
from app.core.rate_limit import rate_limiter
from app.services.homepage_cache import homepage_cache
from app.services.wizards import DraftRegistry, draft_registry

from tests.helpers.mock_factories import (
    make_mock_admin,
    make_mock_db,
    make_mock_super_admin,
)

# ─────────────────────────────────────────────────────────────────────────────
# Process-wide state
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Caches and limiters are module singletons; start every test empty."""
    homepage_cache.invalidate()
    draft_registry.clear()
    rate_limiter.reset()
    yield
    homepage_cache.invalidate()
    draft_registry.clear()
    rate_limiter.reset()


# ─────────────────────────────────────────────────────────────────────────────
# Unit fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def db():
    return make_mock_db()


@pytest.fixture
def event_bus() -> ContentEventBus:
    return ContentEventBus()


@pytest.fixture
def admin():
    return make_mock_admin()


@pytest.fixture
def super_admin():
    return make_mock_super_admin()


@pytest.fixture
def drafts() -> DraftRegistry:
    return DraftRegistry(ttl_seconds=3600)


# ─────────────────────────────────────────────────────────────────────────────
# API Client
# ─────────────────────────────────────────────────────────────────────────────


def _override_app(app, db, current_admin, event_bus, drafts) -> None:
    from app.api.deps.auth import get_current_admin, get_db_with_rls
    from app.api.v1.drafts import get_draft_registry
    from app.core.database import get_db
    from app.core.events import get_event_bus

    app.dependency_overrides[get_current_admin] = lambda: current_admin

    async def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db

    # get_db_with_rls sets the RLS context first. Tests skip RLS and just yield the session.
    async def override_db_rls():
        yield db

    app.dependency_overrides[get_db_with_rls] = override_db_rls
    app.dependency_overrides[get_event_bus] = lambda: event_bus
    app.dependency_overrides[get_draft_registry] = lambda: drafts


@pytest.fixture
async def api_client(db, admin, event_bus, drafts):
    """HTTP client that bypasses JWT auth and uses the mocked DB session.

    For testing endpoint logic without external dependencies.
    Overrides: get_current_admin, get_db, get_db_with_rls, get_event_bus,
    get_draft_registry
    """
    from app.main import app

    _override_app(app, db, admin, event_bus, drafts)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def super_admin_client(db, super_admin, event_bus, drafts):
    """HTTP client authenticated as a super-admin."""
    from app.main import app

    _override_app(app, db, super_admin, event_bus, drafts)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def anonymous_client(db):
    """HTTP client with no credentials. Only the public feeds should answer."""
    from app.core.database import get_db
    from app.main import app

    async def override_db():
        yield db

    app.dependency_overrides[get_db] = override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
