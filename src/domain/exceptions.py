"""
Domain-specific exceptions.

These exceptions represent business rule violations and domain errors.
They are independent of infrastructure concerns; the presentation layer
maps each of them to an HTTP status code.
"""

from enum import Enum


class PostcardError(Exception):
    """Base exception for all postcard submission errors."""

    pass


class ValidationError(PostcardError):
    """Raised when the request body is missing fields or carries invalid ones."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid postcard request: " + "; ".join(errors))

    @property
    def fields(self) -> list[str]:
        """Field paths named by the errors, in order."""
        return [error.split(":", 1)[0] for error in self.errors]


class QuotaExceededError(PostcardError):
    """Raised when the process-wide send limit has been reached."""

    def __init__(self, sent: int, maximum: int):
        self.sent = sent
        self.maximum = maximum
        super().__init__(f"Send limit reached ({sent}/{maximum})")


class DuplicateCodeError(PostcardError):
    """Raised when a single-use access code has already been consumed."""

    def __init__(self) -> None:
        super().__init__("This access code has already been used")


class ConfigError(PostcardError):
    """
    Raised when a required setting is absent at call time.

    Only the setting name is kept; the value (a credential, usually) never
    ends up in the message.
    """

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"Required setting '{setting}' is not configured")


# Provider statuses that reject our credentials rather than the postcard
AUTH_FAILURE_STATUSES = frozenset({401, 403})


class ProviderErrorKind(str, Enum):
    """Why the print-and-mail provider call failed."""

    UNREACHABLE = "unreachable"
    MALFORMED_RESPONSE = "malformed_response"
    REJECTED = "rejected"


class ProviderError(PostcardError):
    """Raised when the provider is unreachable, replies garbage, or rejects the postcard."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        detail: str,
        status_code: int | None = None,
    ):
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Provider error ({kind.value}): {detail}")

    @property
    def is_content_fault(self) -> bool:
        """
        True when the provider refused the content rather than failing to serve it.

        401 and 403 mean our credentials were refused: a deployment fault,
        not something the caller can fix by changing the postcard.
        """
        return (
            self.kind is ProviderErrorKind.REJECTED
            and self.status_code is not None
            and self.status_code < 500
            and self.status_code not in AUTH_FAILURE_STATUSES
        )


class InternalError(PostcardError):
    """Raised for unexpected faults during artifact generation or request assembly."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"Unexpected failure during {stage}")
