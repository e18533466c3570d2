"""
Postcard domain model.

Value objects that flow through the submission pipeline. They are immutable
and hold nothing the pipeline has not validated.
"""

from dataclasses import dataclass, field
from typing import Any

from src.domain.exceptions import ConfigError

# Media type -> file extension for the artifacts we accept or produce
EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "application/pdf": "pdf",
    "text/html": "html",
}

# Trimmed physical card sizes, landscape, in millimetres
CARD_SIZES_MM = {
    "A6": (148.0, 105.0),
    "A5": (210.0, 148.0),
}


@dataclass(frozen=True)
class Artifact:
    """
    One side of the postcard as the provider receives it.

    Built fresh for every request. Nothing caches or persists artifacts.
    """

    content: bytes
    media_type: str
    filename: str

    @classmethod
    def for_side(cls, side: str, content: bytes, media_type: str) -> "Artifact":
        """Create an artifact named after the card side ("front.jpg", "back.pdf", ...)."""
        extension = EXTENSIONS.get(media_type, "bin")
        return cls(content=content, media_type=media_type, filename=f"{side}.{extension}")

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class EncodedImage:
    """A base64 image from the request body, already checked for size and decodability."""

    data: bytes
    media_type: str


@dataclass(frozen=True)
class RecipientOverride:
    """Address supplied by the caller. All five fields are present or none is."""

    name: str
    street: str
    city: str
    postal_code: str
    country: str


@dataclass(frozen=True)
class Recipient:
    """Recipient block in the shape the provider expects."""

    first_name: str
    last_name: str
    address1: str
    city: str
    postcode: str
    country: str

    @classmethod
    def from_override(cls, override: RecipientOverride) -> "Recipient":
        """
        Build a recipient from a caller-supplied address.

        The full name is split on whitespace: the first token is the first
        name, the rest (possibly empty) is the last name.
        """
        parts = override.name.split()
        return cls(
            first_name=parts[0],
            last_name=" ".join(parts[1:]),
            address1=override.street,
            city=override.city,
            postcode=override.postal_code,
            country=override.country,
        )


@dataclass(frozen=True)
class DefaultRecipient:
    """
    Fixed recipient configured for the deployment.

    Fields may be unset; resolve() refuses to build a partial address.
    """

    name: str | None
    street: str | None
    city: str | None
    postal_code: str | None
    country: str

    @property
    def is_complete(self) -> bool:
        return not self._missing_settings()

    def _missing_settings(self) -> list[str]:
        # Blank values count as missing
        return [
            setting
            for setting, value in (
                ("default_recipient_name", self.name),
                ("default_recipient_street", self.street),
                ("default_recipient_city", self.city),
                ("default_recipient_postal_code", self.postal_code),
                ("default_recipient_country", self.country),
            )
            if not (value and value.strip())
        ]

    def resolve(self) -> Recipient:
        """
        Build the recipient block.

        Raises:
            ConfigError: If any part of the default address is missing
        """
        missing = self._missing_settings()
        if missing:
            raise ConfigError(missing[0])

        return Recipient.from_override(
            RecipientOverride(
                name=self.name or "",
                street=self.street or "",
                city=self.city or "",
                postal_code=self.postal_code or "",
                country=self.country,
            )
        )


@dataclass(frozen=True)
class PostcardRequest:
    """
    A validated postcard submission.

    Invariant: message is set unless back_image is supplied in its place.
    """

    front_image: EncodedImage
    message: str | None = None
    back_image: EncodedImage | None = None
    recipient_override: RecipientOverride | None = None
    access_code: str | None = None


@dataclass(frozen=True)
class SubmissionResult:
    """Normalized provider answer for an accepted postcard."""

    provider_id: str | None
    status: str
    raw: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class SubmissionReceipt:
    """What the caller gets back: the provider result and the quota after the commit."""

    result: SubmissionResult
    sent: int
    remaining: int
