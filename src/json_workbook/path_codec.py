"""Encoding of tree paths into printable row metadata strings."""

import re
from typing import List
from urllib.parse import quote, unquote

from .types import Path, PathDecodeError, PathSegment


SEPARATOR = "."
EMPTY_KEY = '""'

_INDEX_PATTERN = re.compile(r"^\[(0|[1-9][0-9]*)\]$")
_BAD_ESCAPE_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")
_RESERVED_RAW = ("[", "]", '"')


class PathCodec:
    """
    Bidirectional codec between paths and encoded path strings.

    Segments are joined with ``.``; array indices are written as ``[i]``
    and object keys are percent-encoded so that separator, bracket and
    quote characters inside key names never read as syntax.
    """

    @staticmethod
    def encode(path: Path) -> str:
        """
        Encode a path into a string.

        Args:
            path: Sequence of object keys (str) and array indices (int)

        Returns:
            Encoded path string; the empty path encodes as ""
        """
        return SEPARATOR.join(PathCodec.encode_segment(segment) for segment in path)

    @staticmethod
    def encode_segment(segment: PathSegment) -> str:
        """Encode a single path segment."""
        if isinstance(segment, bool):
            raise TypeError("Path segments must be str or int, got bool")
        if isinstance(segment, int):
            if segment < 0:
                raise ValueError(f"Array index must be non-negative, got {segment}")
            return f"[{segment}]"
        if isinstance(segment, str):
            if segment == "":
                return EMPTY_KEY
            # quote() keeps "." unescaped
            return quote(segment, safe="").replace(".", "%2E")
        raise TypeError(f"Path segments must be str or int, got {type(segment).__name__}")

    @staticmethod
    def decode(text: str) -> Path:
        """
        Decode an encoded path string.

        Args:
            text: Encoded path string

        Returns:
            Tuple of path segments

        Raises:
            PathDecodeError: If the string is not a well-formed encoded path
        """
        if text == "":
            return ()

        segments: List[PathSegment] = []
        for position, part in enumerate(text.split(SEPARATOR)):
            segments.append(PathCodec.decode_segment(part, text, position))
        return tuple(segments)

    @staticmethod
    def decode_segment(part: str, text: str = "", position: int = 0) -> PathSegment:
        """Decode a single encoded segment."""
        location = {"path": text or part, "segment": position}

        if part == "":
            raise PathDecodeError(f"Empty segment in path {text!r}", location)

        if part == EMPTY_KEY:
            return ""

        if part.startswith("["):
            match = _INDEX_PATTERN.match(part)
            if not match:
                raise PathDecodeError(f"Malformed array index {part!r} in path {text!r}", location)
            return int(match.group(1))

        for char in _RESERVED_RAW:
            if char in part:
                raise PathDecodeError(f"Unescaped {char!r} in path segment {part!r}", location)

        if _BAD_ESCAPE_PATTERN.search(part):
            raise PathDecodeError(f"Malformed percent escape in path segment {part!r}", location)

        try:
            return unquote(part, errors="strict")
        except UnicodeDecodeError as e:
            raise PathDecodeError(f"Invalid UTF-8 escape in path segment {part!r}: {e}", location)

    @staticmethod
    def join(parent: str, segment: PathSegment) -> str:
        """Append one segment to an already encoded path."""
        encoded = PathCodec.encode_segment(segment)
        return f"{parent}{SEPARATOR}{encoded}" if parent else encoded
