"""
Raster back renderer.

Draws the message on a white canvas the size of the card at print
resolution and encodes it as PNG.
"""

import io
import logging

from PIL import Image, ImageDraw, ImageFont

from src.application.back_artifact import BackRenderer, BackStrategy
from src.domain.postcard import CARD_SIZES_MM, Artifact

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> list[str]:
    """
    Greedy word wrap measured with the actual font.

    Explicit newlines start a new paragraph; a single word wider than the
    line is broken between characters.
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if draw.textlength(candidate, font=font) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
                current = ""

            while draw.textlength(word, font=font) > max_width and len(word) > 1:
                cut = len(word) - 1
                while cut > 1 and draw.textlength(word[:cut], font=font) > max_width:
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


class RasterBackRenderer(BackRenderer):
    """
    Renders the back side as a PNG with Pillow.

    The canvas is the trimmed card size at `dpi`, the text block starts at
    the top-left margin. When no TrueType font is configured, Pillow's
    bundled font is used at the same size.
    """

    strategy = BackStrategy.RASTER

    BACKGROUND = (255, 255, 255)
    TEXT_COLOR = (51, 51, 51)
    FONT_PT = 14
    LINE_SPACING = 1.5

    def __init__(
        self,
        card_size: str = "A5",
        dpi: int = 300,
        margin_mm: float = 10.0,
        font_path: str | None = None,
    ):
        width_mm, height_mm = CARD_SIZES_MM[card_size]
        self.dpi = dpi
        self.size = (self._to_px(width_mm), self._to_px(height_mm))
        self.margin = self._to_px(margin_mm)
        self.font_px = round(self.FONT_PT / 72 * dpi)
        self.font_path = font_path

    def _to_px(self, length_mm: float) -> int:
        return round(length_mm / MM_PER_INCH * self.dpi)

    def _load_font(self):
        if self.font_path:
            return ImageFont.truetype(self.font_path, self.font_px)
        return ImageFont.load_default(size=self.font_px)

    def render(self, message: str) -> Artifact:
        width, height = self.size
        image = Image.new("RGB", self.size, self.BACKGROUND)
        draw = ImageDraw.Draw(image)
        font = self._load_font()

        lines = wrap_text(draw, message, font, width - 2 * self.margin)
        line_height = round(self.font_px * self.LINE_SPACING)

        y = self.margin
        drawn = 0
        for line in lines:
            if y + self.font_px > height - self.margin:
                break
            draw.text((self.margin, y), line, fill=self.TEXT_COLOR, font=font)
            y += line_height
            drawn += 1

        if drawn < len(lines):
            logger.warning(
                f"Message does not fit on the card, {len(lines) - drawn} line(s) cut",
                extra={"type": "render_overflow", "strategy": self.strategy.value},
            )

        buffer = io.BytesIO()
        image.save(buffer, format="PNG", dpi=(self.dpi, self.dpi))
        content = buffer.getvalue()

        logger.debug(f"Rendered PNG back side {width}x{height} ({len(content)} bytes)")
        return Artifact.for_side("back", content, "image/png")
