"""
Back artifact generation (Port + selector).

Defines the contract for turning a message into the back side of the card
and the generator that picks the source of the back artifact for a request.
Concrete renderers live in src.infrastructure.rendering.
"""

from abc import ABC, abstractmethod
from enum import Enum

from src.domain.postcard import Artifact, PostcardRequest


class BackStrategy(str, Enum):
    """Server-side rendering strategies for the back of the card."""

    MARKUP = "markup"
    DOCUMENT = "document"
    RASTER = "raster"


class BackRenderer(ABC):
    """
    Abstract interface for back-side renderers.

    Implementations must be deterministic: the same message must always
    produce the same output (no timestamps, no random ids).
    """

    strategy: BackStrategy

    @abstractmethod
    def render(self, message: str) -> Artifact:
        """
        Render the message into a back artifact.

        Args:
            message: The sender's note, already validated

        Returns:
            Artifact with bytes, media type and filename
        """
        pass


class BackArtifactGenerator:
    """
    Chooses where the back artifact comes from.

    The only branch is explicit: a back image supplied by the caller is used
    as is, otherwise the configured renderer draws the message. A renderer
    failure is never papered over by switching to another strategy.
    """

    def __init__(self, renderer: BackRenderer):
        self.renderer = renderer

    @property
    def strategy(self) -> BackStrategy:
        return self.renderer.strategy

    def generate(self, request: PostcardRequest) -> Artifact:
        if request.back_image is not None:
            return Artifact.for_side(
                "back", request.back_image.data, request.back_image.media_type
            )

        if request.message is None:
            # Guaranteed by RequestValidator
            raise ValueError("Cannot render a back side without a message")

        return self.renderer.render(request.message)
