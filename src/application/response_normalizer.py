"""
ResponseNormalizer: raw provider reply -> SubmissionResult or ProviderError.

The provider answers in several shapes: JSON with a `success` flag, JSON
error objects with a failing status, HTML error pages from a proxy, or
nothing at all. All of them end up in one taxonomy here. No retries.
"""

import json
import logging
from typing import Any

from src.application.postcard_provider import RawProviderResponse
from src.domain.exceptions import ProviderError, ProviderErrorKind
from src.domain.postcard import SubmissionResult

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 200
DEFAULT_STATUS = "submitted"


def _excerpt(text: str) -> str:
    text = " ".join(text.split())
    if len(text) > EXCERPT_LENGTH:
        return text[:EXCERPT_LENGTH] + "..."
    return text


def _provider_message(payload: dict[str, Any]) -> str:
    """Best human-readable reason the provider gave."""
    for key in ("error", "message", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, dict) and isinstance(value.get("message"), str):
            return value["message"]
    return "Provider rejected the postcard"


def normalize_provider_response(raw: RawProviderResponse) -> SubmissionResult:
    """
    Map a raw provider response to the internal result taxonomy.

    Process:
    1. Body does not parse as a JSON object -> MALFORMED_RESPONSE
    2. `success` is false, or status is not 2xx -> REJECTED
    3. Otherwise -> SubmissionResult with the provider id and status

    Raises:
        ProviderError: For malformed or rejected responses
    """
    try:
        payload = json.loads(raw.text) if raw.text.strip() else None
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        detail = _excerpt(raw.text) or "empty response body"
        logger.error(
            f"Malformed provider response (status {raw.status_code}): {detail}",
            extra={"type": "provider_malformed", "status_code": raw.status_code},
        )
        raise ProviderError(
            ProviderErrorKind.MALFORMED_RESPONSE, detail, status_code=raw.status_code
        )

    ok_status = 200 <= raw.status_code < 300
    if not ok_status or payload.get("success") is False:
        detail = _provider_message(payload)
        logger.warning(
            f"Provider rejected postcard (status {raw.status_code}): {detail}",
            extra={"type": "provider_rejected", "status_code": raw.status_code},
        )
        raise ProviderError(ProviderErrorKind.REJECTED, detail, status_code=raw.status_code)

    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}

    provider_id = data.get("id")
    status = data.get("status")
    return SubmissionResult(
        provider_id=str(provider_id) if provider_id is not None else None,
        status=str(status) if status else DEFAULT_STATUS,
        raw=payload,
    )
