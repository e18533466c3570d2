"""
HTTP adapter for the print-and-mail provider.

Sends the assembled request with httpx and hands back the raw status and
body text. JSON parsing is the normalizer's job.
"""

import logging
import time

import httpx

from src.application.postcard_provider import PostcardProvider, ProviderRequest, RawProviderResponse
from src.domain.exceptions import ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)


class HttpxPostcardProvider(PostcardProvider):
    """
    Provider client built on httpx.AsyncClient.

    Decision: every call has an explicit timeout. An unbounded wait on the
    provider would pin a quota reservation (and a worker) forever.

    Args:
        timeout_seconds: Total timeout for connect, write and read
        transport: Optional transport (httpx.MockTransport in tests)
    """

    def __init__(
        self,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def send(self, request: ProviderRequest) -> RawProviderResponse:
        # URL only: query params may carry the API key
        logger.info(f"Sending postcard to provider: POST {request.url}")
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                if request.is_multipart:
                    response = await client.post(
                        request.url,
                        params=request.params,
                        headers=request.headers,
                        data=request.form,
                        files=request.files,
                    )
                else:
                    response = await client.post(
                        request.url,
                        params=request.params,
                        headers=request.headers,
                        json=request.json,
                    )

        except httpx.TimeoutException as e:
            logger.error(f"Provider call timed out after {self.timeout_seconds}s")
            raise ProviderError(
                ProviderErrorKind.UNREACHABLE,
                f"Provider did not answer within {self.timeout_seconds} seconds",
            ) from e

        except httpx.TransportError as e:
            logger.error(f"Provider unreachable: {type(e).__name__}")
            raise ProviderError(
                ProviderErrorKind.UNREACHABLE,
                f"Could not reach the provider ({type(e).__name__})",
            ) from e

        except httpx.RequestError as e:
            # DecodingError and friends: the reply arrived but cannot be read
            logger.error(f"Unreadable provider reply: {type(e).__name__}")
            raise ProviderError(
                ProviderErrorKind.MALFORMED_RESPONSE,
                f"Provider reply could not be decoded ({type(e).__name__})",
            ) from e

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Provider answered {response.status_code} in {elapsed_ms:.0f}ms",
            extra={
                "type": "provider_call",
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return RawProviderResponse(status_code=response.status_code, text=response.text)
