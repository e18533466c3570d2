"""
FastAPI routes for postcard submission.

This module defines the HTTP API endpoints.
Each route is thin - it just handles HTTP concerns and delegates to the use case.
Domain errors are turned into the flat {success: false, error, details} envelope.
"""

import asyncio
import logging
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Annotated, Any, TypeVar

from config.settings import settings
from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from src.application.submit_postcard import SubmitPostcardUseCase
from src.domain.exceptions import (
    ConfigError,
    DuplicateCodeError,
    InternalError,
    PostcardError,
    ProviderError,
    QuotaExceededError,
    ValidationError,
)
from src.domain.quota import QuotaGuard
from src.presentation.dependencies import get_quota_guard, get_submit_postcard_use_case
from src.presentation.schemas import (
    ErrorResponse,
    HealthCheckResponse,
    SendPostcardResponse,
    ServiceInfoResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499

# Create router
router = APIRouter(prefix="/api", tags=["postcards"])


class ClientDisconnectedError(Exception):
    """Raised when the caller goes away before the pipeline finishes."""

    def __init__(self) -> None:
        super().__init__("Client disconnected before the postcard was submitted")


def error_response(
    status_code: int,
    error: str,
    details: Any = None,
    sent: int | None = None,
    maximum: int | None = None,
) -> JSONResponse:
    """Build the standard failure envelope."""
    body = ErrorResponse(error=error, details=details, sent=sent, maximum=maximum)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


async def run_until_disconnect(http_request: Request, work: Awaitable[T]) -> T:
    """
    Await `work`, cancelling it if the client disconnects first.

    Cancellation propagates into the use case, which releases its quota
    reservation without committing anything.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=settings.disconnect_poll_seconds)
            if done:
                return task.result()
            if await http_request.is_disconnected():
                task.cancel()
                # Let the use case run its cleanup before answering
                await asyncio.gather(task, return_exceptions=True)
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()


@router.post(
    "/send-postcard",
    response_model=SendPostcardResponse,
    status_code=status.HTTP_200_OK,
    responses={
        200: {"description": "Postcard accepted by the provider"},
        400: {"model": ErrorResponse, "description": "Invalid request or content rejected"},
        403: {"model": ErrorResponse, "description": "Send limit reached or code already used"},
        500: {"model": ErrorResponse, "description": "Configuration or internal error"},
        502: {"model": ErrorResponse, "description": "Provider unreachable or malformed reply"},
    },
    summary="Send a postcard",
    description="""
    Turn a photo and a short note into a mailed postcard.

    Business Rules:
    - frontImage (base64, optionally a data URL) is required, 5 MiB at most
    - message is required unless a pre-rendered backImage is supplied
    - recipientOverride must carry name, street, city, postalCode and country
    - accessCode, when given, can be used once
    - The process sends at most MAX_SENDS postcards
    """,
)
async def send_postcard(
    http_request: Request,
    payload: Annotated[Any, Body()],
    use_case: Annotated[SubmitPostcardUseCase, Depends(get_submit_postcard_use_case)],
) -> SendPostcardResponse | JSONResponse:
    """
    Send a postcard.

    Decision: Provider content rejections map to 400 and transport-level
    faults to 502, so callers can tell "fix your input" from "try later".
    """
    try:
        receipt = await run_until_disconnect(http_request, use_case.execute(payload))

        return SendPostcardResponse(
            message="Postcard sent successfully",
            sent=receipt.sent,
            remaining=receipt.remaining,
            provider_id=receipt.result.provider_id,
            status=receipt.result.status,
            raw=receipt.result.raw,
        )

    except ValidationError as e:
        logger.warning(f"Submission rejected: {e!s}")
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Missing or invalid postcard data", details=e.errors
        )

    except QuotaExceededError as e:
        logger.warning(f"Submission rejected: {e!s}")
        return error_response(
            status.HTTP_403_FORBIDDEN, "Send limit reached", sent=e.sent, maximum=e.maximum
        )

    except DuplicateCodeError as e:
        logger.warning(f"Submission rejected: {e!s}")
        return error_response(status.HTTP_403_FORBIDDEN, str(e))

    except ConfigError as e:
        logger.error(f"Service misconfigured: {e!s}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "The postcard service is not configured",
            details=f"Missing setting: {e.setting}",
        )

    except ProviderError as e:
        status_code = (
            status.HTTP_400_BAD_REQUEST if e.is_content_fault else status.HTTP_502_BAD_GATEWAY
        )
        logger.error(f"Provider failure: {e!s}")
        return error_response(
            status_code,
            "The print provider did not accept the postcard",
            details={"kind": e.kind.value, "message": e.detail, "status": e.status_code},
        )

    except InternalError as e:
        logger.error(f"Internal error during submission: {e!s}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
        )

    except ClientDisconnectedError as e:
        logger.warning(str(e))
        return error_response(CLIENT_CLOSED_REQUEST, str(e))

    except PostcardError as e:
        logger.error(f"Domain error during submission: {e}")
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))

    except Exception as e:
        logger.error(f"Unexpected error during submission: {e}", exc_info=True)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
        )


@router.api_route(
    "/send-postcard",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=ServiceInfoResponse,
    response_model_by_alias=True,
    summary="Submission endpoint status",
    description="Answers probes with the quota state instead of an error.",
)
async def send_postcard_info(
    quota: Annotated[QuotaGuard, Depends(get_quota_guard)],
) -> ServiceInfoResponse:
    """
    Informational answer for anything but POST.

    Decision: Health-check probes often hit the public URL with GET or HEAD;
    answering 405 would flag the service as down.
    """
    snapshot = quota.snapshot()
    return ServiceInfoResponse(
        service=settings.app_name,
        status="ok",
        message="POST a JSON body with frontImage and message to send a postcard",
        sent=snapshot.sent,
        remaining=snapshot.remaining,
        maximum=snapshot.maximum,
    )


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Check if the service is running and healthy",
    tags=["health"],
)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        timestamp=datetime.now(UTC),
    )
