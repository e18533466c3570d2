"""
pytest fixtures for integration tests.

Integration tests use:
- FastAPI's TestClient (in-process, no network needed)
- The real dependency graph: validator, renderer, request builder, httpx client
- MockProvider behind httpx.MockTransport instead of the real provider
- A fresh quota guard per test

Decision: Only the two process-wide seams are overridden (the quota guard
and the provider transport). Everything between them runs as in production.
"""

import pytest
from fastapi.testclient import TestClient

from config.settings import settings
from src.domain.quota import QuotaGuard
from src.infrastructure.provider.http_client import HttpxPostcardProvider
from src.main import app
from src.presentation.dependencies import get_postcard_provider, get_quota_guard
from tests.mocks.mock_provider import MockProvider


@pytest.fixture
def quota() -> QuotaGuard:
    """The quota guard the app sees during this test."""
    return QuotaGuard(max_sends=settings.max_sends)


@pytest.fixture
def api_client(quota: QuotaGuard):
    """
    Create FastAPI TestClient with the provider and quota overridden.

    Returns:
        TestClient instance for making API requests

    Decision: Using TestClient as a context manager ensures the app's
    lifespan events (startup/shutdown) are triggered.
    """
    MockProvider.clear()

    app.dependency_overrides[get_quota_guard] = lambda: quota
    app.dependency_overrides[get_postcard_provider] = lambda: HttpxPostcardProvider(
        timeout_seconds=settings.provider_timeout_seconds,
        transport=MockProvider.transport(),
    )

    with TestClient(app) as client:
        yield client

    # Clean up overrides after test
    app.dependency_overrides.clear()
    MockProvider.clear()


@pytest.fixture
def send_postcard(api_client, front_image_b64):
    """
    Helper fixture to submit a postcard.

    Usage:
        def test_something(send_postcard):
            response = send_postcard(message="Hola")
            assert response.status_code == 200

    Decision: Any field passed as a keyword replaces the default body field;
    passing None removes it.
    """

    def _send(**fields):
        body = {"frontImage": front_image_b64, "message": "Feliz cumpleaños!"}
        body.update(fields)
        body = {key: value for key, value in body.items() if value is not None}
        return api_client.post("/api/send-postcard", json=body)

    return _send


@pytest.fixture
def exhaust_quota(quota: QuotaGuard):
    """Count `n` sends (default: all of them) without calling the provider."""

    def _exhaust(n: int | None = None):
        for _ in range(quota.snapshot().remaining if n is None else n):
            quota.admit()
            quota.commit()

    return _exhaust
