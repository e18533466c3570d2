"""
ProviderRequestBuilder: artifacts + recipient -> ProviderRequest.

Supports both wire shapes the provider has accepted over time (multipart
form with binary parts, or one JSON body with base64 parts) and both API key
placements (query string or Authorization header). Which one is used is a
deployment setting.
"""

import base64
import logging
from typing import Any, Literal

from src.application.postcard_provider import ProviderRequest
from src.domain.exceptions import ConfigError
from src.domain.postcard import Artifact, DefaultRecipient, Recipient, RecipientOverride

logger = logging.getLogger(__name__)

BodyFormat = Literal["multipart", "json"]
AuthPlacement = Literal["query", "header"]


class ProviderRequestBuilder:
    """
    Assembles outbound postcard requests.

    Args:
        api_base: Provider base URL (region-specific host)
        api_path: Postcard creation path
        api_key: Provider API key, checked at build time
        body_format: "multipart" or "json"
        auth_placement: "query" (?api_key=...) or "header" (Bearer token)
        test_mode: Ask the provider not to print or mail anything
        size: Card size token ("A5", "A6")
        post_unverified: Mail even if the provider cannot verify the address
        default_recipient: Used when the request carries no override
    """

    def __init__(
        self,
        api_base: str,
        api_path: str,
        api_key: str | None,
        body_format: BodyFormat = "multipart",
        auth_placement: AuthPlacement = "query",
        test_mode: bool = True,
        size: str = "A5",
        post_unverified: bool = True,
        default_recipient: DefaultRecipient | None = None,
    ):
        if body_format not in ("multipart", "json"):
            raise ValueError(f"Unsupported body format: {body_format}")
        if auth_placement not in ("query", "header"):
            raise ValueError(f"Unsupported auth placement: {auth_placement}")

        self.url = api_base.rstrip("/") + "/" + api_path.lstrip("/")
        self._api_key = api_key
        self.body_format = body_format
        self.auth_placement = auth_placement
        self.test_mode = test_mode
        self.size = size
        self.post_unverified = post_unverified
        self.default_recipient = default_recipient

    def resolve_recipient(self, override: RecipientOverride | None) -> Recipient:
        """
        Pick the recipient: the override when present, the configured default otherwise.

        Raises:
            ConfigError: If there is no override and no complete default
        """
        if override is not None:
            return Recipient.from_override(override)
        if self.default_recipient is None:
            raise ConfigError("default_recipient_name")
        return self.default_recipient.resolve()

    def build(
        self,
        front: Artifact,
        back: Artifact,
        recipient_override: RecipientOverride | None = None,
    ) -> ProviderRequest:
        """
        Build the provider request.

        Raises:
            ConfigError: If the API key or the recipient is not configured
        """
        if not self._api_key:
            raise ConfigError("provider_api_key")

        recipient = self.resolve_recipient(recipient_override)

        headers: dict[str, str] = {"Accept": "application/json"}
        params: dict[str, str] = {}
        if self.auth_placement == "header":
            headers["Authorization"] = f"Bearer {self._api_key}"
        else:
            params["api_key"] = self._api_key

        if self.body_format == "json":
            request = ProviderRequest(
                url=self.url,
                headers=headers,
                params=params,
                json=self._json_body(front, back, recipient),
            )
        else:
            request = ProviderRequest(
                url=self.url,
                headers=headers,
                params=params,
                form=self._form_fields(recipient),
                files={
                    "front": (front.filename, front.content, front.media_type),
                    "back": (back.filename, back.content, back.media_type),
                },
            )

        logger.debug(
            f"Built {self.body_format} provider request for {self.url} "
            f"(auth: {self.auth_placement}, test: {self.test_mode})"
        )
        return request

    def _form_fields(self, recipient: Recipient) -> dict[str, str]:
        return {
            "test": "true" if self.test_mode else "false",
            "size": self.size,
            "post_unverified": "1" if self.post_unverified else "0",
            "recipient[firstname]": recipient.first_name,
            "recipient[lastname]": recipient.last_name,
            "recipient[address1]": recipient.address1,
            "recipient[city]": recipient.city,
            "recipient[postcode]": recipient.postcode,
            "recipient[country]": recipient.country,
        }

    def _json_body(self, front: Artifact, back: Artifact, recipient: Recipient) -> dict[str, Any]:
        return {
            "test": self.test_mode,
            "size": self.size,
            "post_unverified": self.post_unverified,
            "recipient": {
                "firstname": recipient.first_name,
                "lastname": recipient.last_name,
                "address1": recipient.address1,
                "city": recipient.city,
                "postcode": recipient.postcode,
                "country": recipient.country,
            },
            "front": _inline_artifact(front),
            "back": _inline_artifact(back),
        }


def _inline_artifact(artifact: Artifact) -> dict[str, str]:
    return {
        "filename": artifact.filename,
        "contentType": artifact.media_type,
        "content": base64.b64encode(artifact.content).decode("ascii"),
    }
