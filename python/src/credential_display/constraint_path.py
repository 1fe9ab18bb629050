# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Parsing and simplification of presentation-exchange constraint paths.

Only the subset of JSONPath used by presentation-exchange ``fields[].path``
entries is supported::

    path       := "$" segment*
    segment    := "." identifier | "." integer | ".*"
                | "[" string "]" | "[" integer "]" | "[*]"
    string     := single- or double-quoted, backslash escapes allowed

Recursive descent (``..``), filter expressions, slices and unions are
rejected with :class:`~types.PathSyntaxError`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from . import config
from .types import ClaimFormat, PathSyntaxError

log = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_\-]*")
_INTEGER = re.compile(r"-?\d+")

SimplifiedPath = list["str | None"]


class SegmentKind(str, Enum):
    ROOT = "root"
    IDENTIFIER = "identifier"
    STRING_LITERAL = "string_literal"
    NUMERIC_LITERAL = "numeric_literal"
    WILDCARD = "wildcard"


@dataclass(frozen=True)
class PathSegment:
    kind: SegmentKind
    value: str | int | None = None

    @property
    def literal(self) -> str | None:
        """The key this segment names, or ``None`` for "any index/key"."""
        if self.kind in (SegmentKind.IDENTIFIER, SegmentKind.STRING_LITERAL):
            return str(self.value)
        return None


def parse_path(path: str) -> list[PathSegment]:
    """Parse a constraint path into segments, root first.

    Raises
    ------
    PathSyntaxError
        If *path* falls outside the supported grammar.
    """
    if not path.startswith("$"):
        raise PathSyntaxError(f"parse_path: path must start with '$': {path!r}")

    segments = [PathSegment(SegmentKind.ROOT, "$")]
    pos = 1
    while pos < len(path):
        char = path[pos]
        if char == ".":
            segment, pos = _parse_member(path, pos + 1)
        elif char == "[":
            segment, pos = _parse_subscript(path, pos + 1)
        else:
            raise PathSyntaxError(f"parse_path: unexpected {char!r} at {pos} in {path!r}")
        segments.append(segment)
    return segments


def simplify_path(
    path: str,
    claim_format: ClaimFormat | str | None = None,
    filter_keys: Iterable[str] = (),
) -> SimplifiedPath | None:
    """Simplify a constraint path for display.

    In mdoc mode the path must be ``$[namespace][element]``; only the element
    identifier is kept. Otherwise the root and the structural wrappers
    ``vc``, ``vp`` and ``credentialSubject`` are dropped, keys are kept and
    wildcards or indices become ``None``.

    Returns ``None`` ("no match") when the path cannot be parsed, does not
    have the mdoc shape in mdoc mode, or contains one of *filter_keys*. This
    function never raises.

    Examples
    --------
    >>> simplify_path("$.vc.credentialSubject.age")
    ['age']
    >>> simplify_path("$['org.iso.18013.5.1']['family_name']", ClaimFormat.MSO_MDOC)
    ['family_name']
    """
    try:
        segments = parse_path(path)
    except PathSyntaxError as exc:
        log.debug("simplify_path: %s", exc)
        return None

    simplified: SimplifiedPath
    if claim_format == ClaimFormat.MSO_MDOC:
        if len(segments) != 3:
            return None
        simplified = [segments[2].literal]
    else:
        simplified = []
        for segment in segments:
            if segment.kind is SegmentKind.ROOT:
                continue
            if segment.literal in config.STRUCTURAL_PATH_SEGMENTS:
                continue
            simplified.append(segment.literal)

    if any(key in simplified for key in filter_keys):
        return None
    return simplified


# ------------------------------------------------------------------
# Internal scanner helpers
# ------------------------------------------------------------------


def _parse_member(path: str, pos: int) -> tuple[PathSegment, int]:
    if path.startswith("*", pos):
        return PathSegment(SegmentKind.WILDCARD), pos + 1

    match = _IDENTIFIER.match(path, pos)
    if match:
        return PathSegment(SegmentKind.IDENTIFIER, match.group()), match.end()

    match = _INTEGER.match(path, pos)
    if match and not match.group().startswith("-"):
        return PathSegment(SegmentKind.NUMERIC_LITERAL, int(match.group())), match.end()

    raise PathSyntaxError(f"parse_path: expected member name at {pos} in {path!r}")


def _parse_subscript(path: str, pos: int) -> tuple[PathSegment, int]:
    pos = _skip_spaces(path, pos)
    if pos >= len(path):
        raise PathSyntaxError(f"parse_path: unterminated '[' in {path!r}")

    char = path[pos]
    if char == "*":
        segment, pos = PathSegment(SegmentKind.WILDCARD), pos + 1
    elif char in ("'", '"'):
        value, pos = _read_string(path, pos)
        segment = PathSegment(SegmentKind.STRING_LITERAL, value)
    else:
        match = _INTEGER.match(path, pos)
        if not match:
            raise PathSyntaxError(
                f"parse_path: unsupported subscript at {pos} in {path!r}"
            )
        segment, pos = PathSegment(SegmentKind.NUMERIC_LITERAL, int(match.group())), match.end()

    pos = _skip_spaces(path, pos)
    if not path.startswith("]", pos):
        raise PathSyntaxError(f"parse_path: expected ']' at {pos} in {path!r}")
    return segment, pos + 1


def _read_string(path: str, pos: int) -> tuple[str, int]:
    quote = path[pos]
    chars: list[str] = []
    pos += 1
    while pos < len(path):
        char = path[pos]
        if char == "\\" and pos + 1 < len(path):
            chars.append(path[pos + 1])
            pos += 2
            continue
        if char == quote:
            return "".join(chars), pos + 1
        chars.append(char)
        pos += 1
    raise PathSyntaxError(f"parse_path: unterminated string literal in {path!r}")


def _skip_spaces(path: str, pos: int) -> int:
    while pos < len(path) and path[pos] == " ":
        pos += 1
    return pos
