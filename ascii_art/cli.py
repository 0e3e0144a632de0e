#!/usr/bin/env python3
"""
ASCII Art Command Line

Converts an image to ASCII art through the interactive shell, or runs a
fixed list of shell commands and exits.

Usage:
    ascii-art -i cat.jpeg                       # Interactive mode
    ascii-art -i cat.jpeg "res down" asciiArt   # Run commands, then exit
    ascii-art --help                            # Help
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ShellConfig
from .image_processor import ImageLoadError
from .logging_conf import setup_logging
from .shell import MSG_INCORRECT_IMAGE, Shell


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ascii-art",
        description="Convert an image to ASCII art",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ascii-art -i cat.jpeg
    Start interactive mode

  ascii-art -i cat.jpeg "add a-z" "res down" asciiArt
    Run the given shell commands in order, then exit

  ascii-art -i cat.jpeg "output html" asciiArt --html-file cat.html
    Write the rendering to an HTML file
"""
    )

    parser.add_argument(
        "commands",
        nargs="*",
        help="Shell commands to run (omit for interactive mode)"
    )

    parser.add_argument(
        "--image", "-i",
        dest="image_path",
        default=None,
        help="Image to convert (default: $ASCII_ART_IMAGE or cat.jpeg)"
    )

    parser.add_argument(
        "--resolution", "-r",
        type=int,
        default=None,
        help="Characters per row (default: 128)"
    )

    parser.add_argument(
        "--charset", "-c",
        default=None,
        help="Initial characters (default: 0123456789)"
    )

    parser.add_argument(
        "--html-file",
        dest="html_path",
        default=None,
        help="Target of 'output html' (default: out.html)"
    )

    parser.add_argument(
        "--font",
        dest="html_font",
        default=None,
        help="Font family used in HTML output (default: Courier New)"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: $ASCII_ART_LOG_LEVEL or WARNING)"
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Also log to this rotating file"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ShellConfig.from_args(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config)

    try:
        shell = Shell(config)
    except ImageLoadError as e:
        logger.error("%s", e)
        print(MSG_INCORRECT_IMAGE, file=sys.stderr)
        return 1

    if args.commands:
        for command in args.commands:
            if not shell.execute(command):
                break
    else:
        shell.run()

    return 0


if __name__ == "__main__":
    sys.exit(main())
