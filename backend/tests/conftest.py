"""
NegotiateAI Backend - Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock async database session (no real DB needed)
    ├── query_result: Factory for mocked `await db.execute(...)` results
    ├── mock_gateway: AsyncMock standing in for the model gateway
    ├── make_user / test_user: User ORM rows; test_user is the caller
    ├── request_ctx: The caller's request context
    ├── make_analysis: Factory for Analysis ORM rows
    └── test_client: HTTPX AsyncClient wired to the app with overrides
"""

import os

# Override settings for testing BEFORE any negotiateai import: the settings
# singleton and the database engine are created at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from negotiateai.context import RequestContext
from negotiateai.models.analysis import Analysis
from negotiateai.models.user import User


VALID_ANALYSIS = {
    "score": 82,
    "tone": "Assertive",
    "sentiment": "Positive",
    "persuasiveStrength": 74,
    "strengths": ["Clear deadline", "Confident framing"],
    "weaknesses": ["No reason given for the deadline"],
    "suggestions": ["Explain what Friday unlocks for both sides"],
    "frameworksUsed": ["Deadline pressure"],
    "techniquesIdentified": ["Anchoring"],
    "powerDynamics": "Writer claims leverage through time pressure",
    "negotiationPhase": "Closing",
}


@pytest.fixture
def valid_analysis():
    return dict(VALID_ANALYSIS)


@pytest.fixture
def valid_analysis_json():
    return json.dumps(VALID_ANALYSIS)


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value = query_result(scalar=row)
        mock_db_session.get.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def query_result():
    """Builds the synchronous Result object `await db.execute()` returns."""

    def _build(scalar=None, rows=None):
        result = MagicMock()
        result.scalar_one_or_none.return_value = scalar
        result.scalars.return_value.all.return_value = list(rows or [])
        return result

    return _build


# ══════════════════════════════════════════════════════════════════════════
# Gateway, user and request context
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_gateway():
    gateway = AsyncMock()
    gateway.complete = AsyncMock()
    gateway.health_check = AsyncMock(return_value=True)
    return gateway


@pytest.fixture
def make_user():
    def _build(**overrides):
        now = datetime.now(timezone.utc)
        fields = dict(
            id=uuid4(),
            name="Dana Tester",
            email="dana@example.com",
            password_hash="not-a-real-hash",
            role="user",
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return User(**fields)

    return _build


@pytest.fixture
def test_user(make_user):
    return make_user()


@pytest.fixture
def request_ctx(test_user):
    return RequestContext(request_id="test1234", user_id=test_user.id)


@pytest.fixture
def make_analysis():
    """Factory for Analysis rows with sensible defaults."""

    def _build(user_id, **overrides):
        now = datetime.now(timezone.utc)
        fields = dict(
            id=uuid4(),
            user_id=user_id,
            original_text="We need this deal closed by Friday.",
            improved_text=None,
            model_id="sales",
            score=82,
            tone="Assertive",
            sentiment="Positive",
            persuasive_strength=74,
            strengths=["Clear deadline"],
            weaknesses=["No reason given"],
            suggestions=["Explain the deadline"],
            frameworks_used=None,
            techniques_identified=None,
            power_dynamics=None,
            negotiation_phase=None,
            is_fallback=False,
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return Analysis(**fields)

    return _build


# ══════════════════════════════════════════════════════════════════════════
# HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(mock_db_session, test_user, request_ctx):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The database session, the current user and the request context are
    replaced via dependency_overrides. Tests that need the real auth
    dependencies pop the corresponding override.
    """
    from negotiateai.context import get_request_context
    from negotiateai.database import get_db_session
    from negotiateai.main import app
    from negotiateai.security import get_current_user

    app.dependency_overrides[get_db_session] = lambda: mock_db_session
    app.dependency_overrides[get_current_user] = lambda: test_user
    app.dependency_overrides[get_request_context] = lambda: request_ctx

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
