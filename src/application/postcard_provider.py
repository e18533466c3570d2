"""
Print-and-mail provider interface (Port).

Defines the outbound request the builder produces and the contract for
sending it. The infrastructure layer provides the HTTP adapter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProviderRequest:
    """
    A fully assembled provider call.

    Exactly one of `form`/`files` (multipart body) or `json` (JSON body) is
    used. `params` carries the API key when it travels in the query string.
    """

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    form: dict[str, str] | None = None
    files: dict[str, tuple[str, bytes, str]] | None = None
    json: dict[str, Any] | None = None

    @property
    def is_multipart(self) -> bool:
        return self.json is None


@dataclass(frozen=True)
class RawProviderResponse:
    """Transport status and body text, unparsed."""

    status_code: int
    text: str


class PostcardProvider(ABC):
    """
    Abstract interface for the print-and-mail provider.

    This is a "port" in Hexagonal Architecture. Implementations return the
    raw reply and leave parsing to the response normalizer, so that HTML
    error pages and empty bodies are an outcome and not a crash.
    """

    @abstractmethod
    async def send(self, request: ProviderRequest) -> RawProviderResponse:
        """
        Perform the outbound call.

        Args:
            request: The assembled provider request

        Returns:
            The raw provider response

        Raises:
            ProviderError: If the provider cannot be reached or times out
        """
        pass
