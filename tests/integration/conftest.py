"""Integration test fixtures — a real Solr core seeded with mock emails.

Expects Solr to be running with an ``emails`` core, e.g.:
    docker run -d -p 8983:8983 solr:9 solr-precreate emails

Seed data is loaded into the core on first use.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Any

import httpx
import pytest

SOLR_HOST = "http://localhost:8983/solr"
SOLR_COLLECTION = "emails"

MOCK_EMAILS: list[dict[str, Any]] = [
    {
        "id": "b3249981-1c2e-4b52-9a53-5d7f3f0f8a11",
        "subject": "Congress dog determine relate admit win trade.",
        "body": (
            "Wall scientist whose hope. Board during quality wear bring. "
            "Exactly plant reach particularly stage."
        ),
        "sender": "james70@example.net",
        "date": "2024-09-14T23:16:18Z",
        "receivers": [
            "wmartin@example.org",
            "hillmichael@example.com",
            "ashley94@example.net",
            "nicholas22@example.org",
            "ucarter@example.com",
        ],
        "tags": ["work", "urgent", "science", "finance", "personal"],
    },
    *[
        {
            "id": f"msg-{n:03d}",
            "subject": f"Quarterly budget review {n}",
            "body": f"Please find the budget figures for region {n} attached.",
            "sender": f"finance{n % 3}@example.com",
            "date": f"2024-03-{n + 1:02d}T09:00:00Z",
            "receivers": [f"team{n}@example.org"],
            "tags": ["finance"],
        }
        for n in range(24)
    ],
]


def _wait_for_service(url: str, timeout: float = 90.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=30)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


async def _seed_solr(host: str = SOLR_HOST, collection: str = SOLR_COLLECTION) -> None:
    async with httpx.AsyncClient(base_url=host, timeout=30) as client:
        # Explicit fields so schemaless guessing does not turn text into strings
        for field in [
            {"name": "subject", "type": "text_general", "stored": True, "multiValued": False},
            {"name": "body", "type": "text_general", "stored": True, "multiValued": False},
            {"name": "sender", "type": "string", "stored": True},
            {"name": "date", "type": "pdate", "stored": True},
            {"name": "receivers", "type": "strings", "stored": True},
            {"name": "tags", "type": "strings", "stored": True},
        ]:
            with contextlib.suppress(httpx.HTTPError):
                await client.post(f"/{collection}/schema", json={"add-field": field})

        await client.post(
            f"/{collection}/update",
            json={"delete": {"query": "*:*"}},
            params={"commit": "true"},
        )

        resp = await client.post(
            f"/{collection}/update",
            json=MOCK_EMAILS,
            params={"commit": "true"},
        )
        resp.raise_for_status()


@pytest.fixture(scope="session")
def solr_ready() -> str:
    """Ensure Solr is running and seeded."""
    if not _wait_for_service(f"{SOLR_HOST}/{SOLR_COLLECTION}/admin/ping"):
        pytest.skip("Solr not available at localhost:8983")
    asyncio.run(_seed_solr())
    return SOLR_HOST
