"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Pre-condition: PostgreSQL + Redis running and ``alembic upgrade head`` applied.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def verified_listing(client: AsyncClient) -> dict:
    """Submit + verify a fresh reforestation project; return its listing."""
    owner = f"owner_{uuid.uuid4().hex[:8]}"
    resp = await client.post("/api/v1/projects", json={
        "name": f"Amazon Restore {uuid.uuid4().hex[:6]}",
        "project_type": "REFORESTATION",
        "country": "Brazil",
        "vintage_year": 2024,
        "requested_tons": 50000,
        "methodology": "VM0047",
        "owner_id": owner,
    })
    project = resp.json()["data"]
    resp = await client.post(
        f"/api/v1/projects/{project['id']}/decision",
        json={"outcome": "VERIFIED", "mrv_score": 90},
    )
    listing_id = resp.json()["data"]["listing_id"]
    resp = await client.get(f"/api/v1/listings/{listing_id}")
    return {"owner_id": owner, "project": project, **resp.json()["data"]}
