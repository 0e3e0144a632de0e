"""
Character Set Definitions and Glyph Rasterization

Provides the character ranges the shell understands and the glyph
renderer that seeds raw character brightness:
- PRINTABLE_ASCII: code points 32-126 ("add all")
- DEFAULT_CHARSET: the digits 0-9
- GlyphRenderer: renders one character to a square monochrome bitmap

A glyph's raw brightness is the fraction of its bitmap that stays white
after the character is drawn in black, so a space is fully bright (1.0)
and dense glyphs approach 0.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFont


logger = logging.getLogger(__name__)


# ============================================================================
# CHARACTER SET DEFINITIONS
# ============================================================================

MIN_ASCII_VALUE = 32
MAX_ASCII_VALUE = 127  # exclusive

PRINTABLE_ASCII = "".join(chr(i) for i in range(MIN_ASCII_VALUE, MAX_ASCII_VALUE))

DEFAULT_CHARSET = "0123456789"

# Named characters accepted by the add/remove commands
SPECIAL_CHARS: Dict[str, str] = {
    "space": " ",
}

DEFAULT_PIXEL_RESOLUTION = 16

# Monospace fonts tried in order before falling back to Pillow's default
FONT_CANDIDATES = (
    "cour.ttf",  # Courier New, Windows
    "/Library/Fonts/Courier New.ttf",  # macOS
    "/usr/share/fonts/truetype/msttcorefonts/Courier_New.ttf",  # Linux
    "/System/Library/Fonts/Menlo.ttc",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
)


def char_range(start: str, end: str) -> List[str]:
    """
    Inclusive range of characters between two endpoints.

    The endpoints may be given in either order: "a-d" and "d-a" both
    yield a, b, c, d.
    """
    lo, hi = sorted((ord(start), ord(end)))
    return [chr(code) for code in range(lo, hi + 1)]


def sorted_chars(chars: Iterable[str]) -> List[str]:
    """Unique characters sorted by code point."""
    return sorted(set(chars))


# ============================================================================
# GLYPH RENDERING
# ============================================================================

@dataclass
class GlyphRenderer:
    """
    Renders single characters to square binary bitmaps and memoizes their
    raw brightness.

    Attributes:
        resolution: Side length of the square bitmap in pixels
        font_paths: Fonts tried in order; Pillow's default font is the fallback
        brightness_cache: Dict mapping character -> fraction of white pixels
    """
    resolution: int = DEFAULT_PIXEL_RESOLUTION
    font_paths: tuple = FONT_CANDIDATES
    brightness_cache: Dict[str, float] = field(default_factory=dict)
    _font: Optional[ImageFont.ImageFont] = field(default=None, repr=False)

    def __post_init__(self):
        if self.resolution < 1:
            raise ValueError(f"Glyph resolution must be positive, got {self.resolution}")

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a monospace font sized to the bitmap."""
        if self._font is None:
            for font_path in self.font_paths:
                try:
                    self._font = ImageFont.truetype(font_path, self.resolution)
                    logger.debug("Glyph font: %s", font_path)
                    break
                except (OSError, IOError):
                    continue

            if self._font is None:
                logger.debug("No TrueType font found, using Pillow default")
                self._font = ImageFont.load_default()

        return self._font

    def render(self, char: str) -> np.ndarray:
        """
        Render a single character to a boolean bitmap.

        Args:
            char: Single character to render

        Returns:
            resolution x resolution boolean array, True where the pixel is white
        """
        if len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")

        size = self.resolution
        img = Image.new('L', (size, size), color=255)
        draw = ImageDraw.Draw(img)
        font = self._get_font()

        # Center the glyph on its bounding box
        bbox = draw.textbbox((0, 0), char, font=font)
        text_width = bbox[2] - bbox[0]
        text_height = bbox[3] - bbox[1]
        x = (size - text_width) // 2 - bbox[0]
        y = (size - text_height) // 2 - bbox[1]

        draw.text((x, y), char, fill=0, font=font)

        return np.array(img) >= 128

    def brightness(self, char: str) -> float:
        """Raw brightness of a character, computed once and cached."""
        cached = self.brightness_cache.get(char)
        if cached is not None:
            return cached

        bitmap = self.render(char)
        value = float(np.count_nonzero(bitmap)) / bitmap.size
        self.brightness_cache[char] = value
        return value
