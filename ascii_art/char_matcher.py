"""
Character Brightness Matcher

Maps tile brightness values to the character whose glyph brightness is
closest. Raw glyph brightness is rescaled against the charset's own
darkest and brightest characters, so the charset always spans [0, 1].

Normalization is tracked as a small state machine:

    CLEAN           normalized map matches the charset
    DIRTY_PARTIAL   characters were added inside the known [min, max];
                    only those need normalizing
    DIRTY_EXTREMES  an extreme changed; every character needs renormalizing

Normalized vectors are shared between matchers through a
CharsetBrightnessCache keyed by charset content, so a charset seen before
(in any insertion order) is restored without recomputation.
"""

import logging
import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from .charsets import GlyphRenderer, sorted_chars


logger = logging.getLogger(__name__)

# Normalized brightness of every character when all share one raw value
DEGENERATE_BRIGHTNESS = 0.5


class EmptyCharsetError(RuntimeError):
    """Raised when matching is attempted with no characters available."""


class MatcherState(Enum):
    CLEAN = "clean"
    DIRTY_PARTIAL = "dirty_partial"
    DIRTY_EXTREMES = "dirty_extremes"


def charset_key(chars: Iterable[str]) -> str:
    """Order-independent identifier of a charset's content."""
    return "".join(sorted_chars(chars))


def normalize(raw: float, lowest: float, highest: float) -> float:
    """Rescale a raw brightness to [0, 1] against the charset extremes."""
    if highest <= lowest:
        return DEGENERATE_BRIGHTNESS
    return (raw - lowest) / (highest - lowest)


@dataclass(frozen=True)
class CachedBrightness:
    """Normalized brightness of one charset, aligned with its content key."""
    normalized: Tuple[float, ...]
    min_brightness: float
    max_brightness: float


class CharsetBrightnessCache:
    """
    Normalized brightness vectors keyed by charset content.

    Shared by every matcher built from the same glyph source. Thread-safe
    for concurrent get/put.
    """

    def __init__(self):
        self._entries: Dict[str, CachedBrightness] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CachedBrightness]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CachedBrightness) -> None:
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SubImgCharMatcher:
    """
    Finds the character whose normalized glyph brightness best matches an
    image brightness.

    Example:
        >>> matcher = SubImgCharMatcher("0123456789")
        >>> matcher.initialize_brightness_map()
        >>> matcher.get_char_by_image_brightness(0.5) in "0123456789"
        True
    """

    def __init__(
        self,
        charset: Iterable[str],
        glyphs: Optional[GlyphRenderer] = None,
        cache: Optional[CharsetBrightnessCache] = None,
    ):
        """
        Args:
            charset: Initial characters (duplicates are ignored)
            glyphs: Source of raw brightness; anything with brightness(char)
            cache: Shared normalization cache (private one if omitted)
        """
        self._glyphs = glyphs if glyphs is not None else GlyphRenderer()
        self._cache = cache if cache is not None else CharsetBrightnessCache()

        self._charset: Set[str] = set()
        self._normalized: Dict[str, float] = {}
        self._pending: Set[str] = set()
        self._min_brightness = math.inf
        self._max_brightness = -math.inf
        self._lookup: Optional[Tuple[List[str], np.ndarray]] = None

        for char in charset:
            self._check_char(char)
            self._charset.add(char)

        self._renormalize()
        self._publish()
        self._state = MatcherState.CLEAN

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> MatcherState:
        return self._state

    @property
    def cache(self) -> CharsetBrightnessCache:
        return self._cache

    def get_charset(self) -> List[str]:
        """Current characters sorted by code point."""
        return sorted_chars(self._charset)

    def raw_brightness(self, char: str) -> float:
        return self._glyphs.brightness(char)

    def normalized_brightness(self, char: str) -> float:
        """Normalized brightness of a character as of the last initialization."""
        return self._normalized[char]

    def __contains__(self, char: str) -> bool:
        return char in self._charset

    def __len__(self) -> int:
        return len(self._charset)

    # ------------------------------------------------------------------
    # Charset edits
    # ------------------------------------------------------------------

    def add_char(self, char: str) -> None:
        """Add a character; no-op if it is already in the charset."""
        self._check_char(char)
        if char in self._charset:
            return

        brightness = self.raw_brightness(char)
        self._charset.add(char)
        self._lookup = None

        extreme = False
        if brightness < self._min_brightness:
            self._min_brightness = brightness
            extreme = True
        if brightness > self._max_brightness:
            self._max_brightness = brightness
            extreme = True

        if extreme:
            self._mark_extremes_dirty()
        elif self._state is not MatcherState.DIRTY_EXTREMES:
            self._pending.add(char)
            self._state = MatcherState.DIRTY_PARTIAL

    def remove_char(self, char: str) -> None:
        """Remove a character; no-op if it is not in the charset."""
        if char not in self._charset:
            return

        brightness = self.raw_brightness(char)
        self._charset.discard(char)
        self._normalized.pop(char, None)
        self._lookup = None

        # The replacement extreme is found by the next full rescan
        extreme = False
        if brightness == self._min_brightness:
            self._min_brightness = math.inf
            extreme = True
        if brightness == self._max_brightness:
            self._max_brightness = -math.inf
            extreme = True

        if extreme:
            self._mark_extremes_dirty()
        elif self._state is MatcherState.DIRTY_PARTIAL:
            self._pending.discard(char)
            if not self._pending:
                self._state = MatcherState.CLEAN

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def initialize_brightness_map(self) -> None:
        """
        Bring the normalized map in line with the current charset.

        Resolution order:
        1. exact content match in the shared cache: copy it
        2. an extreme changed: renormalize everything
        3. nothing changed: keep current values
        4. only non-extreme additions: normalize just those characters

        Cases 2-4 publish the result to the cache under this charset's key.
        """
        key = charset_key(self._charset)
        cached = self._cache.get(key) if key else None

        if cached is not None:
            logger.debug("Charset cache hit for %r", key)
            self._normalized = dict(zip(key, cached.normalized))
            self._min_brightness = cached.min_brightness
            self._max_brightness = cached.max_brightness
        elif self._state is MatcherState.DIRTY_EXTREMES:
            logger.debug("Renormalizing %d characters", len(self._charset))
            self._renormalize()
            self._publish()
        elif self._state is MatcherState.CLEAN:
            self._publish()
        else:
            logger.debug("Normalizing %d added characters", len(self._pending))
            for char in self._pending:
                self._normalized[char] = normalize(
                    self.raw_brightness(char), self._min_brightness, self._max_brightness
                )
            self._publish()

        self._pending.clear()
        self._state = MatcherState.CLEAN
        self._lookup = None

    def _renormalize(self) -> None:
        """Rescan extremes over the whole charset and normalize every character."""
        raw = {char: self.raw_brightness(char) for char in self._charset}
        if raw:
            self._min_brightness = min(raw.values())
            self._max_brightness = max(raw.values())
        else:
            self._min_brightness = math.inf
            self._max_brightness = -math.inf

        self._normalized = {
            char: normalize(value, self._min_brightness, self._max_brightness)
            for char, value in raw.items()
        }

    def _publish(self) -> None:
        key = charset_key(self._charset)
        if not key:
            return
        entry = CachedBrightness(
            normalized=tuple(self._normalized[char] for char in key),
            min_brightness=self._min_brightness,
            max_brightness=self._max_brightness,
        )
        self._cache.put(key, entry)

    def _mark_extremes_dirty(self) -> None:
        self._pending.clear()
        self._state = MatcherState.DIRTY_EXTREMES

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def get_char_by_image_brightness(self, brightness: float) -> str:
        """
        Character whose normalized brightness is nearest to the given value.

        Ties go to the character with the smaller code point.

        Raises:
            EmptyCharsetError: if the charset is empty
        """
        if not self._charset:
            raise EmptyCharsetError("No characters available for matching")

        if self._state is not MatcherState.CLEAN:
            self.initialize_brightness_map()

        chars, values = self._lookup_table()
        # argmin keeps the first minimum; chars are in code point order
        return chars[int(np.argmin(np.abs(values - brightness)))]

    def _lookup_table(self) -> Tuple[List[str], np.ndarray]:
        if self._lookup is None:
            chars = sorted_chars(self._charset)
            values = np.array([self._normalized[char] for char in chars], dtype=np.float64)
            self._lookup = (chars, values)
        return self._lookup

    @staticmethod
    def _check_char(char: str) -> None:
        if not isinstance(char, str) or len(char) != 1:
            raise ValueError(f"Expected a single character, got {char!r}")
