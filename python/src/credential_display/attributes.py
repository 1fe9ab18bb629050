# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Mapping of credential claim trees into values a UI can render directly."""

from __future__ import annotations

import base64
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Mapping, Union

from dateutil.parser import isoparse

from .image import detect_image_mime_type

log = logging.getLogger(__name__)

MappedAttribute = Union[
    str, int, float, bool, None, dict[Any, "MappedAttribute"], list["MappedAttribute"]
]

# Date-only or ISO 8601 date-time, optionally with fraction and offset.
_DATE_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}(?::?\d{2})?)?)?$"
)


def is_date_string(value: str) -> bool:
    """Return True when *value* lexically looks like, and parses as, a date."""
    if not _DATE_PATTERN.match(value):
        return False
    try:
        isoparse(value)
    except (ValueError, OverflowError):
        log.debug("is_date_string: %r matches the pattern but is not a date", value)
        return False
    return True


def format_date(value: datetime | date | str) -> str:
    """Format a date for display, e.g. ``"November 14, 2023"``.

    Date-times are converted to UTC first; naive date-times are taken as UTC.
    Strings are parsed as ISO 8601.
    """
    if isinstance(value, str):
        value = isoparse(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
    return f"{value:%B} {value.day}, {value.year}"


def format_timestamp(seconds: int | float) -> str:
    """Format a JWT NumericDate (seconds since the epoch) for display."""
    return format_date(datetime.fromtimestamp(seconds, tz=timezone.utc))


def recursively_map_attributes(value: Any) -> MappedAttribute:
    """Transform a claim value into a UI-safe equivalent.

    Rules, in order:

    - binary data becomes a ``data:`` URI when it is a recognized image,
      otherwise it is decoded as UTF-8 text
    - ``None``, booleans and numbers pass through
    - dates, and strings that look like dates, are formatted with
      :func:`format_date`; a date that cannot be formatted is kept as is
      (native dates as ISO 8601 text)
    - other strings pass through
    - mappings and sequences are mapped element by element, keeping keys and
      order
    - any other object is mapped over its public attributes

    The input must be a finite tree.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        mime_type = detect_image_mime_type(data)
        if mime_type:
            encoded = base64.b64encode(data).decode("ascii")
            return f"data:{mime_type};base64,{encoded}"
        return data.decode("utf-8", errors="replace")

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, (datetime, date)):
        return _format_date_or_keep(value)

    if isinstance(value, str):
        return _format_date_or_keep(value) if is_date_string(value) else value

    if isinstance(value, Mapping):
        return {key: recursively_map_attributes(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [recursively_map_attributes(item) for item in value]

    if hasattr(value, "__dict__"):
        return {
            key: recursively_map_attributes(item)
            for key, item in vars(value).items()
            if not key.startswith("_")
        }

    return value


def _format_date_or_keep(value: datetime | date | str) -> MappedAttribute:
    # Dates that parse but fall outside datetime's range after the UTC shift.
    try:
        return format_date(value)
    except (ValueError, OverflowError):
        log.debug("recursively_map_attributes: cannot format date %r", value)
        return value if isinstance(value, str) else value.isoformat()
