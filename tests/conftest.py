import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from loguru import logger

# ------------------------------------------------------------------
# FORCE TESTING SETTINGS
# Must be set BEFORE importing app.main so Settings() can load.
# ------------------------------------------------------------------
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes!")
os.environ["ENV"] = "test"
os.environ["LOG_DECISIONS"] = "true"

from app.main import app
from app.core.security import create_actor_token
from app.schemas.actor import Actor


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def make_actor():
    def _make(role="faculty", department="CSE", sections=None, id="u-1", **extra):
        return Actor.model_validate({
            "id": id,
            "role": role,
            "department": department,
            "assigned_sections": sections or [],
            **extra,
        })
    return _make


@pytest.fixture
def auth_headers():
    def _headers(actor: Actor) -> dict:
        return {"Authorization": f"Bearer {create_actor_token(actor)}"}
    return _headers


@pytest.fixture
def log_records():
    """Collects loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
