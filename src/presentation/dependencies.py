"""
FastAPI dependency injection.

This module provides dependency injection for our application.
It's the glue that wires together our layers (domain, application, infrastructure).

Decision: Using FastAPI's dependency injection system provides:
1. Clean separation of concerns
2. Easy testing (can inject mocks)
3. Lifecycle management
4. Type safety
"""

import logging
from functools import lru_cache
from typing import Annotated

from config.settings import settings
from fastapi import Depends

from src.application.back_artifact import BackArtifactGenerator, BackRenderer, BackStrategy
from src.application.postcard_provider import PostcardProvider
from src.application.provider_request_builder import ProviderRequestBuilder
from src.application.request_validator import RequestValidator
from src.application.submit_postcard import SubmitPostcardUseCase
from src.domain.postcard import DefaultRecipient
from src.domain.quota import QuotaGuard
from src.infrastructure.provider.http_client import HttpxPostcardProvider
from src.infrastructure.rendering.document_renderer import DocumentBackRenderer
from src.infrastructure.rendering.markup_renderer import MarkupBackRenderer
from src.infrastructure.rendering.raster_renderer import RasterBackRenderer

logger = logging.getLogger(__name__)


@lru_cache
def get_quota_guard() -> QuotaGuard:
    """
    Get the quota guard (singleton).

    Decision: lru_cache gives exactly one guard per process, created on
    first use and shared by every request. It is memory-resident: the count
    and the used codes are lost on restart, and each worker process has its
    own guard.

    Returns:
        QuotaGuard instance
    """
    logger.info(f"Creating quota guard (max sends: {settings.max_sends})")
    return QuotaGuard(max_sends=settings.max_sends)


def get_default_recipient() -> DefaultRecipient:
    return DefaultRecipient(
        name=settings.default_recipient_name,
        street=settings.default_recipient_street,
        city=settings.default_recipient_city,
        postal_code=settings.default_recipient_postal_code,
        country=settings.default_recipient_country,
    )


def get_request_validator(
    default_recipient: Annotated[DefaultRecipient, Depends(get_default_recipient)],
) -> RequestValidator:
    """
    Get the request validator configured for this deployment.

    An override is required only when the request is the recipient source
    and no default address is configured to fall back to.
    """
    from_request = settings.recipient_source == "request"
    return RequestValidator(
        max_image_bytes=settings.max_image_bytes,
        max_message_length=settings.max_message_length,
        accept_recipient_override=from_request,
        require_recipient_override=from_request and not default_recipient.is_complete,
    )


@lru_cache
def get_back_renderer() -> BackRenderer:
    """
    Get the renderer selected by BACK_STRATEGY (singleton).

    Returns:
        BackRenderer for the configured strategy
    """
    strategy = BackStrategy(settings.back_strategy)
    logger.info(f"Back side strategy: {strategy.value} ({settings.postcard_size})")

    if strategy is BackStrategy.DOCUMENT:
        return DocumentBackRenderer(card_size=settings.postcard_size, title=settings.back_title)
    if strategy is BackStrategy.RASTER:
        return RasterBackRenderer(
            card_size=settings.postcard_size, font_path=settings.raster_font_path
        )
    return MarkupBackRenderer(card_size=settings.postcard_size)


def get_back_artifact_generator(
    renderer: Annotated[BackRenderer, Depends(get_back_renderer)],
) -> BackArtifactGenerator:
    return BackArtifactGenerator(renderer)


def get_provider_request_builder(
    default_recipient: Annotated[DefaultRecipient, Depends(get_default_recipient)],
) -> ProviderRequestBuilder:
    """
    Get the provider request builder.

    Uses centralized settings for all configuration instead of os.getenv.
    The API key is only checked when a request is built, so a missing key
    surfaces as a ConfigError on submission rather than at startup.
    """
    return ProviderRequestBuilder(
        api_base=settings.provider_api_base,
        api_path=settings.provider_api_path,
        api_key=settings.provider_api_key,
        body_format=settings.provider_body_format,
        auth_placement=settings.provider_auth_placement,
        test_mode=settings.provider_test_mode,
        size=settings.postcard_size,
        post_unverified=settings.post_unverified,
        default_recipient=default_recipient,
    )


def get_postcard_provider() -> PostcardProvider:
    """
    Get the provider client.

    Decision: Always returns the real HTTP client. Tests override this
    dependency with one backed by httpx.MockTransport.
    """
    return HttpxPostcardProvider(timeout_seconds=settings.provider_timeout_seconds)


def get_submit_postcard_use_case(
    validator: Annotated[RequestValidator, Depends(get_request_validator)],
    quota: Annotated[QuotaGuard, Depends(get_quota_guard)],
    back_generator: Annotated[BackArtifactGenerator, Depends(get_back_artifact_generator)],
    request_builder: Annotated[ProviderRequestBuilder, Depends(get_provider_request_builder)],
    provider: Annotated[PostcardProvider, Depends(get_postcard_provider)],
) -> SubmitPostcardUseCase:
    """
    Get SubmitPostcard use case with dependencies injected.

    Returns:
        SubmitPostcardUseCase instance
    """
    return SubmitPostcardUseCase(validator, quota, back_generator, request_builder, provider)
