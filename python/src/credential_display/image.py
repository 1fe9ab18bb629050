# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Image format detection from leading magic bytes."""

from __future__ import annotations

# (offset, signature, mime type)
_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"\x00\x00\x00\x0cjP  \r\n\x87\n", "image/jp2"),
    (0, b"\xff\x4f\xff\x51", "image/jp2"),
)


def detect_image_mime_type(data: bytes) -> str | None:
    """Return the MIME type of *data* if it starts like a known image format.

    Recognizes PNG, JPEG, GIF, WebP and JPEG 2000 (the formats used for
    portraits and signatures in mdoc and SD-JWT credentials).
    """
    for offset, signature, mime_type in _SIGNATURES:
        if data[offset : offset + len(signature)] == signature:
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None
