"""Pytest configuration and fixtures for backend tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from rvu_engine.main import app
from rvu_engine.services.statistics import reset_statistics_service

# Wednesday, mid-month, so weekly and monthly windows do not line up
ANCHOR = datetime(2026, 3, 18, 12, 0, tzinfo=UTC)


def make_case(
    case_id: str,
    created_at: datetime | None,
    total_rvu: float,
    estimated_value: float,
    codes: list[tuple[str, float, str | None]],
    description: str = "",
) -> dict[str, Any]:
    """Build a case payload the way the record store returns it."""
    stamp = created_at.isoformat() if created_at else None
    return {
        "id": case_id,
        "totalRvu": total_rvu,
        "estimatedValue": estimated_value,
        "createdAt": stamp,
        "codes": [
            {
                "code": code,
                "description": description or f"Procedure {code}",
                "rvu": rvu,
                "category": category,
                "createdAt": stamp,
            }
            for code, rvu, category in codes
        ],
    }


@pytest.fixture
def anchor() -> datetime:
    """Reference time used as "now" by the statistics tests."""
    return ANCHOR


@pytest.fixture
def sample_cases() -> list[dict[str, Any]]:
    """Six cases spread over the last year and a bit.

    - C1: yesterday, A (10) + B (6), Knee
    - C2: 3 days ago, X (5), Hip
    - C3: 20 days ago, X (5), Hip
    - C4: 40 days ago, X (5), no category
    - C5: 400 days ago, Y (8), null category
    - C6: no timestamp and no codes
    """
    return [
        make_case("C1", ANCHOR - timedelta(days=1), 16.0, 1040.0, [("A", 10.0, "Knee"), ("B", 6.0, "Knee")]),
        make_case("C2", ANCHOR - timedelta(days=3), 5.0, 325.0, [("X", 5.0, "Hip")]),
        make_case("C3", ANCHOR - timedelta(days=20), 5.0, 325.0, [("X", 5.0, "Hip")]),
        make_case("C4", ANCHOR - timedelta(days=40), 5.0, 325.0, [("X", 5.0, "")]),
        make_case("C5", ANCHOR - timedelta(days=400), 8.0, 520.0, [("Y", 8.0, None)]),
        make_case("C6", None, 2.0, 130.0, []),
    ]


@pytest.fixture
def fresh_statistics_service():
    """Reset the statistics singleton around a test."""
    reset_statistics_service()
    yield
    reset_statistics_service()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
