"""
ASCII Art Result Container and Output Sinks

Provides the AsciiArtResult dataclass wrapping a rendered character grid,
and the two output methods the shell can switch between:
- ConsoleAsciiOutput: prints the grid to a text stream
- HtmlAsciiOutput: writes a styled HTML page to a file
"""

import html
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, TextIO


logger = logging.getLogger(__name__)

DEFAULT_HTML_PATH = "out.html"
DEFAULT_HTML_FONT = "Courier New"


@dataclass
class AsciiArtResult:
    """
    Container for a rendered character grid.

    Attributes:
        grid: Rows of single-character strings
        metadata: Rendering parameters (resolution, charset, ...)
    """
    grid: List[List[str]]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def width(self) -> int:
        """Width in characters."""
        return max((len(row) for row in self.grid), default=0)

    @property
    def height(self) -> int:
        """Height in rows."""
        return len(self.grid)

    def lines(self, separator: str = "") -> List[str]:
        return [separator.join(row) for row in self.grid]

    @property
    def text(self) -> str:
        return "\n".join(self.lines())

    def to_html(
        self,
        font_family: str = DEFAULT_HTML_FONT,
        font_size: str = "4px",
        bg_color: str = "#ffffff",
        fg_color: str = "#000000",
        title: str = "ASCII Art",
    ) -> str:
        """
        Convert the grid to a styled HTML page.

        Args:
            font_family: CSS font family (a monospace fallback is appended)
            font_size: CSS font size
            bg_color: Background color
            fg_color: Text color
            title: HTML page title

        Returns:
            Complete HTML document string
        """
        escaped_text = html.escape(self.text)

        meta_html = ""
        if self.metadata:
            meta_items = "".join(
                f"<li><strong>{html.escape(str(key))}:</strong> {html.escape(str(value))}</li>"
                for key, value in self.metadata.items()
            )
            meta_html = f"""
        <div class="metadata">
            <ul>{meta_items}</ul>
        </div>
"""

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{html.escape(title)}</title>
    <style>
        body {{
            background-color: {bg_color};
            color: {fg_color};
            margin: 0;
            padding: 20px;
        }}
        pre {{
            font-family: '{font_family}', monospace;
            font-size: {font_size};
            line-height: 1.0;
            letter-spacing: 0.4em;
            margin: 0;
            white-space: pre;
        }}
        .metadata {{
            margin-top: 20px;
            font-family: sans-serif;
            font-size: 12px;
        }}
        .metadata ul {{
            list-style: none;
            padding: 0;
        }}
    </style>
</head>
<body>
    <pre>{escaped_text}</pre>
{meta_html}
</body>
</html>
"""

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the rendered grid."""
        unique_chars = {char for row in self.grid for char in row}
        return {
            'width': self.width,
            'height': self.height,
            'total_characters': sum(len(row) for row in self.grid),
            'unique_characters': len(unique_chars),
        }

    def __repr__(self) -> str:
        return f"AsciiArtResult(width={self.width}, height={self.height})"

    def __str__(self) -> str:
        return self.text


def create_result(grid: List[List[str]], **metadata) -> AsciiArtResult:
    """Build a result stamped with its generation time."""
    stamped = {'generated_at': datetime.now().isoformat(timespec='seconds')}
    stamped.update(metadata)
    return AsciiArtResult(grid=grid, metadata=stamped)


class AsciiOutput:
    """Destination for a rendered result."""

    def out(self, result: AsciiArtResult) -> None:
        raise NotImplementedError


class ConsoleAsciiOutput(AsciiOutput):
    """Prints each row with a space between characters."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def out(self, result: AsciiArtResult) -> None:
        stream = self.stream or sys.stdout
        for line in result.lines(separator=" "):
            print(line, file=stream)


class HtmlAsciiOutput(AsciiOutput):
    """Writes the result as an HTML page, overwriting the target file."""

    def __init__(self, path: str = DEFAULT_HTML_PATH, font_name: str = DEFAULT_HTML_FONT):
        self.path = path
        self.font_name = font_name

    def out(self, result: AsciiArtResult) -> None:
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(result.to_html(font_family=self.font_name))
        logger.info("Wrote %dx%d ASCII art to %s", result.height, result.width, self.path)
