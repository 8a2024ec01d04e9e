"""Shared test fixtures.

Time is simulated with FakeScheduler: sleeps return immediately but advance
the clock and are recorded, so backoff schedules, session expiry and cache
TTLs can be asserted without waiting.
"""

import json
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient, Response
from pydantic import SecretStr

from smartapply.core.config import settings
from smartapply.core.rate_limiting import limiter
from smartapply.core.storage import InMemoryStorage
from smartapply.providers import factory
from smartapply.providers.config import ProviderConfig
from smartapply.providers.llm.base import TaskType
from smartapply.providers.llm.mock_adapter import MockLLMProvider
from smartapply.schemas.roadmap import RoadmapRequest
from smartapply.services.auth_service import CredentialDirectory, seed_demo_accounts
from smartapply.services.roadmap_cache import RoadmapCache
from smartapply.services.roadmap_generation import RoadmapService

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105  # gitleaks:allow

# bcrypt minimum work factor keeps the suite fast
TEST_BCRYPT_ROUNDS = 4

ROADMAP_JSON = {
    "primaryCareer": "Data Scientist",
    "relatedRoles": ["ML Engineer", "Data Analyst", "AI Engineer", "Data Engineer"],
    "summary": "A path from analytics fundamentals to production machine learning.",
    "careerPath": {
        "nodes": [
            {
                "id": "1",
                "type": "course",
                "title": "Statistics Foundations",
                "description": "Probability and inference",
                "duration": "8 weeks",
                "difficulty": "beginner",
                "requirements": ["Algebra"],
                "position": {"x": 100, "y": 100},
            },
            {
                "id": "2",
                "type": "skill",
                "title": "Python for Data",
                "description": "pandas and numpy",
                "position": {"x": 300, "y": 100},
            },
            {
                "id": "3",
                "type": "job",
                "title": "Junior Data Scientist",
                "description": "First industry role",
                "salary": "$70k-95k",
                "position": {"x": 500, "y": 100},
            },
        ],
        "edges": [
            {
                "id": "e1-2",
                "source": "1",
                "target": "2",
                "sourceHandle": "bottom",
                "targetHandle": "top",
                "type": "smoothstep",
                "animated": True,
            },
            {"id": "e2-3", "source": "2", "target": "3", "type": "smoothstep"},
        ],
    },
    "alternatives": [
        {
            "id": "alt1",
            "title": "Analytics Engineer",
            "description": "Model data for analysts",
            "matchScore": 84,
            "salary": "$80k-110k",
            "requirements": ["SQL", "dbt"],
            "growth": "High",
        },
        {"title": "Research Assistant"},
    ],
}

ALTERNATIVES_JSON = [
    {
        "id": "alt1",
        "title": "Analytics Engineer",
        "description": "Model data for analysts",
        "matchScore": 84,
        "salary": "$80k-110k",
        "requirements": ["SQL", "dbt"],
        "growth": "high",
    },
    {"id": "alt2", "title": "BI Developer", "matchScore": 78, "growth": "medium"},
    {"id": "alt3", "title": "Quantitative Analyst", "growth": "explosive"},
]


class FakeScheduler:
    """Simulated clock. sleep() records the duration and advances time."""

    def __init__(self, start: datetime | None = None) -> None:
        # Wall clock start: session tokens are also checked against real time
        self.current = start or datetime.now(UTC)
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)

    @property
    def total_slept(self) -> float:
        return sum(self.sleeps)


# =============================================================================
# Building blocks
# =============================================================================


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def directory() -> CredentialDirectory:
    """Credential directory holding the demo accounts (demo/Demo123, admin/Admin123)."""
    directory = CredentialDirectory(bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    seed_demo_accounts(directory)
    return directory


@pytest.fixture
def roadmap_request() -> RoadmapRequest:
    return RoadmapRequest(
        domain="Data Science",
        job_role="Data Scientist",
        experience_level="junior",
        skills=("Python", "SQL", "Statistics"),
        education_level="bachelors",
    )


@pytest.fixture
def retry_config() -> ProviderConfig:
    """Default retry policy: 3 attempts, 1s base, no jitter."""
    return ProviderConfig(google_api_key="test-key")


@pytest.fixture
def mock_llm() -> Iterator[MockLLMProvider]:
    """MockLLMProvider with valid roadmap and alternatives responses.

    Injected into the factory singleton and reset after the test.
    """
    mock = MockLLMProvider(
        {
            TaskType.ROADMAP_GENERATION: json.dumps(ROADMAP_JSON),
            TaskType.ALTERNATIVE_CAREERS: json.dumps(ALTERNATIVES_JSON),
            TaskType.HEALTH_CHECK: "OK",
        }
    )
    factory._llm_provider = mock

    yield mock

    factory.reset_providers()


@pytest.fixture
def roadmap_service(mock_llm: MockLLMProvider, scheduler: FakeScheduler) -> RoadmapService:
    return RoadmapService(
        mock_llm,
        config=ProviderConfig(google_api_key="test-key"),
        cache=RoadmapCache(scheduler=scheduler),
        scheduler=scheduler,
    )


# =============================================================================
# API Test Fixtures
# =============================================================================


@pytest.fixture
def test_app(roadmap_service: RoadmapService, directory: CredentialDirectory, scheduler: FakeScheduler):
    """Application wired to the mock provider, simulated clock and test secret."""
    from smartapply.main import create_app

    original_secret = settings.auth_secret
    original_limiter_enabled = limiter.enabled
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)
    limiter.enabled = False

    yield create_app(
        roadmap_service=roadmap_service,
        credentials=directory,
        scheduler=scheduler,
    )

    settings.auth_secret = original_secret
    limiter.enabled = original_limiter_enabled


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous client. Use ``sign_in`` to attach a session cookie."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def attach_session(client: AsyncClient, response: Response) -> None:
    """Copy the session cookie from a login or signup response onto the client.

    The cookie is copied by hand: it carries the Secure flag, which the
    cookie jar would not send back over plain http.
    """
    name = settings.auth_cookie_name
    token = response.cookies[name]
    client.cookies.delete(name)
    client.cookies.set(name, token)


async def sign_in(
    client: AsyncClient,
    username: str = "demo",
    password: str = "Demo123",
    **extra: str,
) -> dict:
    """Log in and attach the session cookie to the client."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password, **extra},
    )
    assert response.status_code == 200, response.text
    attach_session(client, response)
    return response.json()["data"]


@pytest_asyncio.fixture
async def demo_client(client: AsyncClient) -> AsyncClient:
    """Client signed in as the demo user (no profile yet)."""
    await sign_in(client)
    return client


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient) -> AsyncClient:
    """Client signed in as the demo admin."""
    await sign_in(client, "admin", "Admin123")
    return client
