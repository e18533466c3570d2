"""
Markup back renderer.

Wraps the message in an HTML page sized like the physical card. The
provider rasterizes the page on its side.
"""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from src.application.back_artifact import BackRenderer, BackStrategy
from src.domain.postcard import CARD_SIZES_MM, Artifact

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "postcard_back.html"


class MarkupBackRenderer(BackRenderer):
    """
    Renders the back side with a Jinja2 template.

    Decision: autoescape is on, so the message can never inject markup into
    the page the provider prints.
    """

    strategy = BackStrategy.MARKUP

    def __init__(self, card_size: str = "A5", margin_mm: float = 10.0):
        self.width_mm, self.height_mm = CARD_SIZES_MM[card_size]
        self.margin_mm = margin_mm

        templates_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=True,
        )

    def render(self, message: str) -> Artifact:
        template = self.jinja_env.get_template(TEMPLATE_NAME)
        html = template.render(
            message=message,
            width_mm=f"{self.width_mm:g}",
            height_mm=f"{self.height_mm:g}",
            margin_mm=f"{self.margin_mm:g}",
        )
        content = html.encode("utf-8")

        logger.debug(f"Rendered HTML back side ({len(content)} bytes)")
        return Artifact.for_side("back", content, "text/html")
