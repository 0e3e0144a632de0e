"""
Interactive ASCII Art Shell

Reads text commands, edits the charset, resolution, image and output
method, and renders on demand.

Commands:
    chars                       show the charset
    add <c|all|space|a-z>       add characters
    remove <c|all|space|a-z>    remove characters
    res <up|down>               double or halve the characters per row
    image <path>                load another image
    output <console|html>       choose where asciiArt writes
    asciiArt                    render
    exit                        quit
"""

import logging
import sys
from typing import Callable, List, Optional, TextIO

import numpy as np

from .algorithm import AsciiArtAlgorithm
from .char_matcher import CharsetBrightnessCache, EmptyCharsetError, SubImgCharMatcher
from .charsets import PRINTABLE_ASCII, SPECIAL_CHARS, GlyphRenderer, char_range
from .config import ShellConfig
from .image_processor import ImageLoadError, ImageProcessor, load_image, padded_size
from .output import AsciiOutput, ConsoleAsciiOutput, HtmlAsciiOutput, create_result


logger = logging.getLogger(__name__)

PROMPT = ">>> "

EXIT_COMMAND = "exit"
CHARS_COMMAND = "chars"
ADD_COMMAND = "add"
REMOVE_COMMAND = "remove"
RES_COMMAND = "res"
IMAGE_COMMAND = "image"
OUTPUT_COMMAND = "output"
RUN_COMMAND = "asciiArt"

ALL_KEYWORD = "all"

MSG_INCORRECT_COMMAND = "Did not execute due to incorrect command."
MSG_INCORRECT_ADD = "Did not add due to incorrect format."
MSG_INCORRECT_REMOVE = "Did not remove due to incorrect format."
MSG_INCORRECT_RES_FORMAT = "Did not change resolution due to incorrect format."
MSG_RES_OUT_OF_BOUNDS = "Did not change resolution due to exceeding boundaries."
MSG_INCORRECT_OUTPUT = "Did not change output method due to incorrect format."
MSG_INCORRECT_IMAGE = "Did not execute due to problem with image file."
MSG_EMPTY_CHARSET = "Did not execute. Charset is empty."


def parse_char_argument(arg: str) -> Optional[List[str]]:
    """
    Characters named by an add/remove argument, or None if malformed.

    Accepts a single character, "all" (printable ASCII), a named special
    character such as "space", or an inclusive range like "a-f" / "f-a".
    """
    if len(arg) == 1:
        return [arg]
    if arg == ALL_KEYWORD:
        return list(PRINTABLE_ASCII)
    if arg in SPECIAL_CHARS:
        return [SPECIAL_CHARS[arg]]
    if len(arg) == 3 and arg[1] == "-":
        return char_range(arg[0], arg[2])
    return None


class Shell:
    """
    Command loop driving the matcher, the image processor and the output.

    Example:
        >>> shell = Shell(ShellConfig(image_path="cat.jpeg"))
        >>> shell.execute("res down")
        >>> shell.execute("asciiArt")
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        out: Optional[TextIO] = None,
        glyphs: Optional[GlyphRenderer] = None,
        cache: Optional[CharsetBrightnessCache] = None,
    ):
        """
        Args:
            config: Shell configuration (defaults if omitted)
            out: Stream for user-facing messages and console output
            glyphs: Raw brightness source for the matcher
            cache: Charset normalization cache shared with other matchers

        Raises:
            ImageLoadError: if the configured image cannot be loaded
        """
        self.config = config or ShellConfig()
        self.out = out if out is not None else sys.stdout

        self.char_matcher = SubImgCharMatcher(
            self.config.charset,
            glyphs=glyphs or GlyphRenderer(resolution=self.config.glyph_resolution),
            cache=cache if cache is not None else CharsetBrightnessCache(),
        )
        self.ascii_output: AsciiOutput = ConsoleAsciiOutput(self.out)

        self.image = load_image(self.config.image_path)
        self.resolution = self._fit_resolution(self.config.resolution, self.image)
        self.image_processor = ImageProcessor(self.image, self.resolution)
        self._processor_stale = False

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self, read_line: Callable[[str], str] = input) -> None:
        """Read and execute commands until 'exit' or end of input."""
        while True:
            try:
                line = read_line(PROMPT)
            except (EOFError, KeyboardInterrupt):
                self._print()
                break

            try:
                if not self.execute(line):
                    break
            except Exception as e:
                logger.exception("Command %r failed", line)
                self._print(f"Error: {e}")

    def execute(self, line: str) -> bool:
        """
        Execute one command line.

        Returns:
            False when the shell should stop, True otherwise
        """
        if line.strip() == EXIT_COMMAND:
            return False

        words = line.split()
        if not words:
            return True

        command, args = words[0], words[1:]
        handler = {
            CHARS_COMMAND: self._view_chars,
            ADD_COMMAND: self._handle_add,
            REMOVE_COMMAND: self._handle_remove,
            RES_COMMAND: self._handle_resolution,
            IMAGE_COMMAND: self._handle_image,
            OUTPUT_COMMAND: self._handle_output,
            RUN_COMMAND: self._run_algorithm,
        }.get(command)

        if handler is None:
            logger.info("Unknown command %r", command)
            self._print(MSG_INCORRECT_COMMAND)
        else:
            handler(args)
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _view_chars(self, args: List[str]) -> None:
        self._print(" ".join(self.char_matcher.get_charset()))

    def _handle_add(self, args: List[str]) -> None:
        chars = parse_char_argument(args[0]) if len(args) == 1 else None
        if chars is None:
            logger.info("Rejected add %r", args)
            self._print(MSG_INCORRECT_ADD)
            return
        for char in chars:
            self.char_matcher.add_char(char)

    def _handle_remove(self, args: List[str]) -> None:
        chars = parse_char_argument(args[0]) if len(args) == 1 else None
        if chars is None:
            logger.info("Rejected remove %r", args)
            self._print(MSG_INCORRECT_REMOVE)
            return
        for char in chars:
            self.char_matcher.remove_char(char)

    def _handle_resolution(self, args: List[str]) -> None:
        if len(args) != 1 or args[0] not in ("up", "down"):
            self._print(MSG_INCORRECT_RES_FORMAT)
            return

        min_chars, max_chars = self._resolution_bounds(self.image)
        if args[0] == "up":
            requested = self.resolution * 2
            allowed = requested <= max_chars
        else:
            requested = self.resolution // 2
            allowed = requested >= min_chars

        if not allowed:
            logger.info("Resolution %d outside [%d, %d]", requested, min_chars, max_chars)
            self._print(MSG_RES_OUT_OF_BOUNDS)
            return

        self._set_resolution(requested)

    def _handle_image(self, args: List[str]) -> None:
        if len(args) != 1:
            self._print(MSG_INCORRECT_IMAGE)
            return

        try:
            image = load_image(args[0])
        except ImageLoadError as e:
            logger.warning("%s", e)
            self._print(MSG_INCORRECT_IMAGE)
            return

        self.image = image
        self._processor_stale = True
        fitted = self._fit_resolution(self.resolution, image)
        if fitted != self.resolution:
            self._set_resolution(fitted)

    def _handle_output(self, args: List[str]) -> None:
        target = args[0] if len(args) == 1 else None
        if target == "console":
            self.ascii_output = ConsoleAsciiOutput(self.out)
        elif target == "html":
            self.ascii_output = HtmlAsciiOutput(self.config.html_path, self.config.html_font)
        else:
            self._print(MSG_INCORRECT_OUTPUT)

    def _run_algorithm(self, args: List[str]) -> None:
        if self._processor_stale:
            self.image_processor = ImageProcessor(self.image, self.resolution)
            self._processor_stale = False

        algorithm = AsciiArtAlgorithm(self.char_matcher, self.image_processor)
        try:
            grid = algorithm.run()
        except EmptyCharsetError:
            self._print(MSG_EMPTY_CHARSET)
            return

        result = create_result(
            grid,
            resolution=self.resolution,
            charset="".join(self.char_matcher.get_charset()),
        )
        self.ascii_output.out(result)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolution_bounds(image: np.ndarray):
        """[min, max] characters per row for an image once padded."""
        width, height = padded_size(image)
        return max(1, width // height), width

    def _fit_resolution(self, resolution: int, image: np.ndarray) -> int:
        min_chars, max_chars = self._resolution_bounds(image)
        return min(max(resolution, min_chars), max_chars)

    def _set_resolution(self, resolution: int) -> None:
        self.resolution = resolution
        self._processor_stale = True
        self._print(f"Resolution set to {resolution}.")

    def _print(self, message: str = "") -> None:
        print(message, file=self.out)
