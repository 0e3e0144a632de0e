"""
Image Tiling and Brightness Grid

Turns an RGB image into a grid of tile brightness values:
- Pads the image to power-of-two dimensions (centered, white border)
- Splits the padded image into equal square tiles, one per output character
- Computes the mean BT.709 luminance of every tile, normalized to [0, 1]
"""

import logging
from typing import Tuple, Union
from pathlib import Path

import numpy as np
import cv2
from PIL import Image, UnidentifiedImageError


logger = logging.getLogger(__name__)

MAX_RGB_VALUE = 255

# ITU-R BT.709 luma coefficients (R, G, B)
LUMA_COEFFICIENTS = np.array([0.2126, 0.7152, 0.0722])

WHITE = (255, 255, 255)


class ImageLoadError(OSError):
    """Raised when an image file cannot be read or decoded."""


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGB array.

    Args:
        path: Path to any image format Pillow can decode

    Returns:
        (height, width, 3) uint8 array

    Raises:
        ImageLoadError: if the file is missing, unreadable or not an image
    """
    try:
        with Image.open(path) as img:
            rgb = img.convert('RGB')
    except (OSError, UnidentifiedImageError) as err:
        raise ImageLoadError(f"Cannot load image {path}: {err}") from err

    logger.debug("Loaded %s (%dx%d)", path, rgb.width, rgb.height)
    return np.array(rgb, dtype=np.uint8)


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n; powers of two are returned unchanged."""
    if n < 1:
        raise ValueError(f"Dimension must be positive, got {n}")
    if n & (n - 1) == 0:
        return n
    return 1 << n.bit_length()


def padded_size(image: np.ndarray) -> Tuple[int, int]:
    """(width, height) the image will have after padding."""
    height, width = image.shape[:2]
    return next_power_of_two(width), next_power_of_two(height)


def pad_to_power_of_two(image: np.ndarray) -> np.ndarray:
    """
    Center an image in a white canvas with power-of-two dimensions.

    Leading padding (top, left) is (new - old) // 2; an odd remainder
    goes to the trailing side (bottom, right).
    """
    height, width = image.shape[:2]
    new_width, new_height = padded_size(image)

    if (new_width, new_height) == (width, height):
        return image.copy()

    left = (new_width - width) // 2
    top = (new_height - height) // 2

    return cv2.copyMakeBorder(
        np.ascontiguousarray(image),
        top,
        new_height - height - top,
        left,
        new_width - width - left,
        cv2.BORDER_CONSTANT,
        value=WHITE,
    )


class ImageProcessor:
    """
    Pads an image, tiles it for a target column count and computes the
    brightness of every tile.

    A processor is bound to one image and one resolution; build a new one
    when either changes.

    Example:
        >>> processor = ImageProcessor(load_image("cat.jpeg"), resolution=128)
        >>> processor.brightness.shape
        (128, 128)
    """

    def __init__(self, image: np.ndarray, resolution: int):
        """
        Args:
            image: (height, width, 3) RGB array
            resolution: Number of tile columns (characters per row)
        """
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"Expected an RGB image, got shape {image.shape}")

        self.resolution = resolution
        self.image = pad_to_power_of_two(image)
        self.padded_height, self.padded_width = self.image.shape[:2]

        if not 1 <= resolution <= self.padded_width:
            raise ValueError(
                f"Resolution {resolution} outside [1, {self.padded_width}]"
            )

        self.tile_size = self.padded_width // resolution
        self.num_rows = self.padded_height // self.tile_size
        self.brightness = self._calculate_brightness()

        logger.debug(
            "ImageProcessor: padded %dx%d, tile %d, grid %dx%d",
            self.padded_width, self.padded_height,
            self.tile_size, self.num_rows, self.resolution,
        )

    @property
    def min_chars_in_row(self) -> int:
        """Lowest resolution that still fits the padded height."""
        return max(1, self.padded_width // self.padded_height)

    def tiles(self) -> np.ndarray:
        """
        Split the padded image into square tiles.

        Returns:
            Read-only view of shape (rows, resolution, S, S, 3) where
            tiles()[r, c] is the tile at grid row r, column c
        """
        size = self.tile_size
        covered = self.image[:self.num_rows * size, :self.resolution * size]
        blocks = covered.reshape(self.num_rows, size, self.resolution, size, 3)
        view = blocks.swapaxes(1, 2)
        view.flags.writeable = False
        return view

    def _calculate_brightness(self) -> np.ndarray:
        """Mean normalized luminance of every tile."""
        luminance = self.tiles().astype(np.float64) @ LUMA_COEFFICIENTS
        sums = luminance.sum(axis=(2, 3))
        # Coefficients sum to 1 only up to float rounding
        return np.clip(sums / (self.tile_size * self.tile_size * MAX_RGB_VALUE), 0.0, 1.0)
