"""
Document back renderer.

Lays the message out on a single PDF page of the card size: a title label
at the top, then the body text word-wrapped inside fixed margins.
"""

import io
import logging

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from src.application.back_artifact import BackRenderer, BackStrategy
from src.domain.postcard import CARD_SIZES_MM, Artifact

logger = logging.getLogger(__name__)


class DocumentBackRenderer(BackRenderer):
    """
    Renders the back side as a PDF with reportlab.

    Decision: the canvas runs in invariant mode. reportlab otherwise embeds
    the creation date and a random document id, and two renders of the same
    message would differ byte for byte.
    """

    strategy = BackStrategy.DOCUMENT

    FONT = "Helvetica"
    TITLE_FONT = "Helvetica-Bold"
    TITLE_SIZE = 16
    BODY_SIZE = 12
    LEADING = 1.4

    def __init__(self, card_size: str = "A5", title: str = "Greetings!", margin_mm: float = 12.0):
        width_mm, height_mm = CARD_SIZES_MM[card_size]
        self.page_size = (width_mm * mm, height_mm * mm)
        self.margin = margin_mm * mm
        self.title = title

    def render(self, message: str) -> Artifact:
        width, height = self.page_size
        buffer = io.BytesIO()

        pdf = canvas.Canvas(buffer, pagesize=self.page_size, invariant=1, pageCompression=0)
        pdf.setTitle(self.title)

        y = height - self.margin - self.TITLE_SIZE
        if self.title:
            pdf.setFont(self.TITLE_FONT, self.TITLE_SIZE)
            pdf.drawString(self.margin, y, self.title)
            y -= self.TITLE_SIZE * self.LEADING * 1.5

        pdf.setFont(self.FONT, self.BODY_SIZE)
        line_height = self.BODY_SIZE * self.LEADING
        lines = simpleSplit(message, self.FONT, self.BODY_SIZE, width - 2 * self.margin)

        drawn = 0
        for line in lines:
            if y < self.margin:
                break
            pdf.drawString(self.margin, y, line)
            y -= line_height
            drawn += 1

        if drawn < len(lines):
            logger.warning(
                f"Message does not fit on the card, {len(lines) - drawn} line(s) cut",
                extra={"type": "render_overflow", "strategy": self.strategy.value},
            )

        pdf.showPage()
        pdf.save()

        content = buffer.getvalue()
        logger.debug(f"Rendered PDF back side ({len(content)} bytes)")
        return Artifact.for_side("back", content, "application/pdf")
