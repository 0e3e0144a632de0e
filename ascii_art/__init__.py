"""
Image-to-ASCII Art Converter

Renders an image as a grid of characters whose glyph brightness follows
the image's local brightness:
- ImageProcessor pads the image to power-of-two dimensions and computes
  one brightness value per square tile
- SubImgCharMatcher picks the character whose normalized glyph brightness
  is nearest, with normalization shared across matchers by charset content
- AsciiArtAlgorithm drives the two and produces the character grid
"""

__version__ = "1.0.0"

from .algorithm import AsciiArtAlgorithm
from .char_matcher import (
    CharsetBrightnessCache,
    EmptyCharsetError,
    MatcherState,
    SubImgCharMatcher,
)
from .charsets import GlyphRenderer
from .image_processor import ImageLoadError, ImageProcessor, load_image
from .output import AsciiArtResult, ConsoleAsciiOutput, HtmlAsciiOutput
from .shell import Shell

__all__ = [
    "AsciiArtAlgorithm",
    "AsciiArtResult",
    "CharsetBrightnessCache",
    "ConsoleAsciiOutput",
    "EmptyCharsetError",
    "GlyphRenderer",
    "HtmlAsciiOutput",
    "ImageLoadError",
    "ImageProcessor",
    "MatcherState",
    "Shell",
    "SubImgCharMatcher",
    "load_image",
]
