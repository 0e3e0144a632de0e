"""
Shell configuration.

Defaults live on the ShellConfig dataclass; environment variables
(ASCII_ART_IMAGE, ASCII_ART_LOG_LEVEL) override them and parsed command
line options override both.
"""

import argparse
import os
from dataclasses import dataclass, field, fields
from typing import Optional

from .charsets import DEFAULT_CHARSET, DEFAULT_PIXEL_RESOLUTION
from .output import DEFAULT_HTML_FONT, DEFAULT_HTML_PATH


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_image() -> str:
    return os.environ.get("ASCII_ART_IMAGE", "cat.jpeg")


def _env_log_level() -> str:
    return os.environ.get("ASCII_ART_LOG_LEVEL", "WARNING").upper()


@dataclass
class ShellConfig:
    """Configuration for the interactive ASCII art shell."""
    image_path: str = field(default_factory=_env_image)
    charset: str = DEFAULT_CHARSET
    resolution: int = 128             # characters per row
    html_path: str = DEFAULT_HTML_PATH
    html_font: str = DEFAULT_HTML_FONT
    glyph_resolution: int = DEFAULT_PIXEL_RESOLUTION
    log_level: str = field(default_factory=_env_log_level)
    log_file: Optional[str] = None
    log_rotate_bytes: int = 5 * 1024 * 1024
    log_rotate_keep: int = 3

    def validate(self) -> "ShellConfig":
        """Check value ranges; returns self for chaining."""
        if self.resolution < 1:
            raise ValueError(f"resolution must be >= 1, got {self.resolution}")
        if self.glyph_resolution < 1:
            raise ValueError(f"glyph_resolution must be >= 1, got {self.glyph_resolution}")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {self.log_level!r}. Available: {list(LOG_LEVELS)}")
        return self

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ShellConfig":
        """Overlay parsed CLI options (None means not given) on the defaults."""
        overrides = {
            f.name: getattr(args, f.name)
            for f in fields(cls)
            if getattr(args, f.name, None) is not None
        }
        return cls(**overrides).validate()
