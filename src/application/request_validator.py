"""
RequestValidator: raw request body -> PostcardRequest.

Shape and types are checked by Pydantic models; the business rules that
span several fields (message or back image, recipient source, size ceiling)
are checked here so that a single ValidationError names every offending
field at once.

The validator is a pure function of its input and its constructor limits.
"""

import base64
import binascii
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaValidationError

from src.domain.exceptions import ValidationError
from src.domain.postcard import EXTENSIONS, EncodedImage, PostcardRequest, RecipientOverride

# data:image/png;base64,....  (the media type and extra parameters are optional)
DATA_URL_PREFIX = re.compile(
    r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+)?(?:;[\w.+-]+=[\w.+-]+)*;base64,",
    re.IGNORECASE,
)
WHITESPACE = re.compile(r"\s+")

# Media types each side may declare in its data URL
FRONT_MEDIA_TYPES = frozenset(t for t in EXTENSIONS if t.startswith("image/"))
BACK_MEDIA_TYPES = frozenset(EXTENSIONS)


class RecipientOverridePayload(BaseModel):
    """recipientOverride as sent by the client. Partial addresses fail here."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1, alias="postalCode")
    country: str = Field(..., pattern=r"^[A-Za-z]{2}$")


class PostcardPayload(BaseModel):
    """
    Request body schema.

    Top-level fields are optional here on purpose: presence rules are
    enforced by RequestValidator so missing fields are reported together.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    front_image: str | None = Field(None, alias="frontImage")
    message: str | None = None
    back_image: str | None = Field(None, alias="backImage")
    recipient_override: RecipientOverridePayload | None = Field(None, alias="recipientOverride")
    access_code: str | None = Field(None, alias="accessCode")


def decoded_size(encoded: str) -> int:
    """
    Exact number of bytes a padded base64 string decodes to.

    Every 4 characters carry 3 bytes, minus one byte per trailing "=".
    """
    padding = len(encoded) - len(encoded.rstrip("="))
    return len(encoded) * 3 // 4 - padding


class RequestValidator:
    """
    Validates postcard submissions.

    Args:
        max_image_bytes: Ceiling for the decoded size of each image
        max_message_length: Maximum message length in characters
        accept_recipient_override: False when the deployment always mails
            the configured default recipient
        require_recipient_override: True when there is no default recipient
            to fall back to
    """

    def __init__(
        self,
        max_image_bytes: int = 5 * 1024 * 1024,
        max_message_length: int = 1000,
        accept_recipient_override: bool = True,
        require_recipient_override: bool = False,
    ):
        self.max_image_bytes = max_image_bytes
        self.max_message_length = max_message_length
        self.accept_recipient_override = accept_recipient_override
        self.require_recipient_override = require_recipient_override

    def validate(self, body: Any) -> PostcardRequest:
        """
        Validate a raw request body.

        Raises:
            ValidationError: Listing every missing or invalid field
        """
        if not isinstance(body, dict):
            raise ValidationError(["body: must be a JSON object"])

        try:
            payload = PostcardPayload.model_validate(body)
        except SchemaValidationError as e:
            raise ValidationError(
                [
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                ]
            ) from e

        errors: list[str] = []

        front_image = None
        if not payload.front_image:
            errors.append("frontImage: is required")
        else:
            front_image = self._decode_image(
                "frontImage", payload.front_image, "image/jpeg", FRONT_MEDIA_TYPES, errors
            )

        back_image = None
        if payload.back_image:
            back_image = self._decode_image(
                "backImage", payload.back_image, "image/png", BACK_MEDIA_TYPES, errors
            )

        message = payload.message or None
        if message is None and not payload.back_image:
            errors.append("message: is required unless backImage is supplied")
        elif message is not None and len(message) > self.max_message_length:
            errors.append(f"message: must be at most {self.max_message_length} characters")

        override = None
        if payload.recipient_override is not None:
            if not self.accept_recipient_override:
                errors.append("recipientOverride: is not accepted by this deployment")
            else:
                override = RecipientOverride(
                    name=payload.recipient_override.name,
                    street=payload.recipient_override.street,
                    city=payload.recipient_override.city,
                    postal_code=payload.recipient_override.postal_code,
                    country=payload.recipient_override.country.upper(),
                )
        elif self.require_recipient_override:
            errors.append("recipientOverride: is required")

        if errors:
            raise ValidationError(errors)

        assert front_image is not None
        return PostcardRequest(
            front_image=front_image,
            message=message,
            back_image=back_image,
            recipient_override=override,
            access_code=payload.access_code or None,
        )

    def _decode_image(
        self,
        field: str,
        value: str,
        default_media_type: str,
        allowed_media_types: frozenset[str],
        errors: list[str],
    ) -> EncodedImage | None:
        """Strip the data URL prefix, enforce the size ceiling, then decode strictly."""
        media_type = default_media_type
        match = DATA_URL_PREFIX.match(value)
        if match:
            media_type = (match.group("media_type") or default_media_type).lower()
            value = value[match.end():]

        if media_type not in allowed_media_types:
            errors.append(f"{field}: unsupported media type {media_type}")
            return None

        encoded = WHITESPACE.sub("", value)
        if not encoded:
            errors.append(f"{field}: is empty")
            return None

        # Size is checked on the encoded form so oversized payloads are never decoded
        size = decoded_size(encoded)
        if size > self.max_image_bytes:
            errors.append(
                f"{field}: decoded size {size} bytes exceeds the {self.max_image_bytes} byte limit"
            )
            return None

        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            errors.append(f"{field}: is not valid base64 data")
            return None

        return EncodedImage(data=data, media_type=media_type)
