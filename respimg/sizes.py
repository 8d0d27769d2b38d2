"""
Parsing of the --size list.

A size list is a comma-separated sequence of ``height[-format]`` tokens:

    480,720-png,1080   ->   480 webp, 720 png, 1080 webp

Height 0 keeps the source resolution (the image is only re-encoded).
Order is preserved and duplicates are kept.
"""

from typing import List, NamedTuple

from .errors import ParseError

DEFAULT_FORMAT = "webp"
DEFAULT_SIZES = "480,720,1080"
FORMAT_SEPARATOR = "-"


class OutputSpec(NamedTuple):
    height: int
    format: str = DEFAULT_FORMAT


def _parse_height(token: str, text: str) -> int:
    # str.isdigit would accept things like "²"
    if not text or not text.isascii() or not text.isdigit():
        raise ParseError(token, f"height {text!r} is not a non-negative integer")
    return int(text)


def parse_size(token: str) -> OutputSpec:
    token = token.strip()
    head, sep, fmt = token.partition(FORMAT_SEPARATOR)
    height = _parse_height(token, head)
    if not sep:
        return OutputSpec(height, DEFAULT_FORMAT)
    fmt = fmt.strip().lower()
    if not fmt:
        raise ParseError(token, "empty format after '-'")
    return OutputSpec(height, fmt)


def parse_sizes(s: str) -> List[OutputSpec]:
    return [parse_size(part) for part in s.split(",")]


def format_sizes(specs: List[OutputSpec]) -> str:
    """Normalised height-format rendering of a size list, for the settings banner."""
    return ",".join(f"{s.height}-{s.format}" for s in specs)
