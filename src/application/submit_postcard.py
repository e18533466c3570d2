"""
Submit Postcard use case.

Orchestrates the postcard submission pipeline:
1. Validate the request body
2. Admit it against the quota (and single-use code)
3. Generate the back artifact
4. Build the provider request
5. Call the provider
6. Normalize the response
7. Commit the quota slot

This use case coordinates between domain objects and the provider port.
"""

import asyncio
import logging
from typing import Any

from src.application.back_artifact import BackArtifactGenerator
from src.application.postcard_provider import PostcardProvider
from src.application.provider_request_builder import ProviderRequestBuilder
from src.application.request_validator import RequestValidator
from src.application.response_normalizer import normalize_provider_response
from src.domain.exceptions import (
    ConfigError,
    DuplicateCodeError,
    InternalError,
    QuotaExceededError,
)
from src.domain.postcard import Artifact, SubmissionReceipt
from src.domain.quota import DenialReason, QuotaGuard

logger = logging.getLogger(__name__)


class SubmitPostcardUseCase:
    """
    Use case for turning a photo and a note into a mailed postcard.

    Decision: All collaborators are injected, including the quota guard.
    The guard is process-scoped state; the use case itself is stateless and
    can be built per request.
    """

    def __init__(
        self,
        validator: RequestValidator,
        quota: QuotaGuard,
        back_generator: BackArtifactGenerator,
        request_builder: ProviderRequestBuilder,
        provider: PostcardProvider,
    ):
        """
        Initialize the use case.

        Args:
            validator: Request body validator
            quota: Process-wide quota and single-use code guard
            back_generator: Back side artifact generator
            request_builder: Provider request builder
            provider: Print-and-mail provider client
        """
        self.validator = validator
        self.quota = quota
        self.back_generator = back_generator
        self.request_builder = request_builder
        self.provider = provider

    async def execute(self, body: Any) -> SubmissionReceipt:
        """
        Execute the postcard submission.

        Steps run strictly in order and stop at the first failure. Once the
        request is admitted, any failure (cancellation included) releases the
        quota slot; the single-use code stays consumed.

        Args:
            body: Raw JSON request body

        Returns:
            SubmissionReceipt with the provider result and the updated quota

        Raises:
            ValidationError: If the body is invalid
            QuotaExceededError: If the send limit has been reached
            DuplicateCodeError: If the access code was already used
            ConfigError: If the provider or recipient is not configured
            ProviderError: If the provider is unreachable or rejects the postcard
            InternalError: If rendering or request assembly fails unexpectedly
        """
        request = self.validator.validate(body)

        admission = self.quota.admit(request.access_code)
        if not admission.allowed:
            if admission.reason is DenialReason.QUOTA_EXHAUSTED:
                logger.warning(f"Send limit reached ({admission.sent}/{admission.maximum})")
                raise QuotaExceededError(admission.sent, admission.maximum)
            logger.warning("Rejected submission with an already used access code")
            raise DuplicateCodeError()

        committed = False
        try:
            try:
                # CPU-bound: keep it off the event loop
                back = await asyncio.to_thread(self.back_generator.generate, request)
            except Exception as e:
                logger.error(f"Back artifact generation failed: {e}", exc_info=True)
                raise InternalError("back artifact generation") from e

            front = Artifact.for_side(
                "front", request.front_image.data, request.front_image.media_type
            )

            try:
                outbound = self.request_builder.build(front, back, request.recipient_override)
            except ConfigError:
                raise
            except Exception as e:
                logger.error(f"Provider request assembly failed: {e}", exc_info=True)
                raise InternalError("provider request assembly") from e

            raw = await self.provider.send(outbound)
            result = normalize_provider_response(raw)

            snapshot = self.quota.commit()
            committed = True
        finally:
            if not committed:
                self.quota.release()

        logger.info(
            f"Postcard accepted by provider (id: {result.provider_id}, "
            f"sent: {snapshot.sent}/{snapshot.maximum})",
            extra={
                "type": "postcard_sent",
                "provider_id": result.provider_id,
                "back_strategy": self.back_generator.strategy.value,
                "back_supplied": request.back_image is not None,
                "back_bytes": back.size,
            },
        )
        return SubmissionReceipt(result=result, sent=snapshot.sent, remaining=snapshot.remaining)
