"""
ASCII art rendering driver: one character per tile of the brightness grid.
"""

import logging
from typing import List

from .char_matcher import EmptyCharsetError, SubImgCharMatcher
from .image_processor import ImageProcessor


logger = logging.getLogger(__name__)

CharGrid = List[List[str]]


class AsciiArtAlgorithm:
    """
    Converts a processed image into a character grid.

    Example:
        >>> algorithm = AsciiArtAlgorithm(matcher, ImageProcessor(image, 64))
        >>> grid = algorithm.run()
    """

    def __init__(self, char_matcher: SubImgCharMatcher, image_processor: ImageProcessor):
        self.char_matcher = char_matcher
        self.image_processor = image_processor

    def run(self) -> CharGrid:
        """
        Map every tile brightness to its best matching character.

        Returns:
            Rows of single-character strings, same shape as the brightness grid

        Raises:
            EmptyCharsetError: if the matcher holds no characters
        """
        if len(self.char_matcher) == 0:
            raise EmptyCharsetError("Cannot render with an empty charset")

        brightness = self.image_processor.brightness
        self.char_matcher.initialize_brightness_map()

        grid = [
            [self.char_matcher.get_char_by_image_brightness(value) for value in row]
            for row in brightness
        ]
        logger.debug("Rendered %dx%d characters", len(grid), len(grid[0]) if grid else 0)
        return grid
