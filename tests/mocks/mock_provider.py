"""
Mock print-and-mail provider for testing.

Plugs into HttpxPostcardProvider through httpx.MockTransport, so the real
HTTP adapter (multipart encoding, query params, headers) is exercised
without any network.

Decision: Using class-level storage, like a fake server shared by every
client instance the dependency injection creates.
"""

import logging
from typing import ClassVar

import httpx

logger = logging.getLogger(__name__)


class MockProvider:
    """
    Fake provider that records requests and answers from a queue.

    Queued responses are returned first (in order); after that every call
    succeeds with a fresh provider id.
    """

    _requests: ClassVar[list[httpx.Request]] = []
    _responses: ClassVar[list[httpx.Response | Exception]] = []
    _counter: ClassVar[int] = 0

    @classmethod
    def handler(cls, request: httpx.Request) -> httpx.Response:
        cls._requests.append(request)

        if cls._responses:
            response = cls._responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response

        cls._counter += 1
        logger.info(f"[MOCK] Accepted postcard {cls._counter}")
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {"id": f"mock-{cls._counter}", "status": "test", "cost": "0.00"},
            },
        )

    @classmethod
    def transport(cls) -> httpx.MockTransport:
        return httpx.MockTransport(cls.handler)

    @classmethod
    def queue_response(cls, response: httpx.Response | Exception) -> None:
        """Answer the next call with `response` (or raise it)."""
        cls._responses.append(response)

    @classmethod
    def get_all_requests(cls) -> list[httpx.Request]:
        return cls._requests.copy()

    @classmethod
    def get_request_count(cls) -> int:
        return len(cls._requests)

    @classmethod
    def clear(cls) -> None:
        """Reset recorded requests and queued responses between tests."""
        cls._requests = []
        cls._responses = []
        cls._counter = 0
