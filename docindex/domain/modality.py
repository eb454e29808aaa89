from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlparse

Modality = Literal["text", "image", "audio", "video"]

AUDIO_EXTENSIONS = frozenset(
    {".mp3", ".wav", ".m4a", ".aac", ".flac", ".ogg", ".oga", ".opus", ".wma"}
)
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".mkv", ".webm", ".avi"})
IMAGE_EXTENSIONS = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".svg"}
)

_DATA_URI_RE = re.compile(r"^data:([^;,]+)[;,]", re.IGNORECASE)


@dataclass(frozen=True)
class ModalityDetection:
    modality: Modality
    mime_type: str | None = None


def _normalize_mime(mime_type: str | None) -> str | None:
    return (mime_type or "").strip().lower() or None


def modality_from_mime(mime_type: str | None) -> Modality | None:
    mime = _normalize_mime(mime_type)
    if not mime:
        return None
    for prefix in ("audio", "video", "image"):
        if mime.startswith(prefix + "/"):
            return prefix  # type: ignore[return-value]
    return None


def modality_from_extension(extension: str | None) -> Modality | None:
    ext = (extension or "").lower()
    if ext in AUDIO_EXTENSIONS:
        return "audio"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    if ext in IMAGE_EXTENSIONS:
        return "image"
    return None


def _extension_of(source: str) -> str:
    path = source.split("?", 1)[0].split("#", 1)[0]
    if "://" in path:
        path = urlparse(path).path
    return posixpath.splitext(path)[1]


def detect_modality(
    source: str | bytes,
    *,
    mime_type: str | None = None,
    filename: str | None = None,
) -> ModalityDetection:
    """Classify an input as text, image, audio or video.

    Checks, in order: the explicit MIME type, a ``data:`` URI prefix, the
    extension of a path or URL, the extension of ``filename``. Anything else
    is text.
    """
    by_mime = modality_from_mime(mime_type)
    if by_mime:
        return ModalityDetection(by_mime, mime_type)

    if isinstance(source, str):
        m = _DATA_URI_RE.match(source)
        if m:
            data_mime = _normalize_mime(m.group(1))
            by_data = modality_from_mime(data_mime)
            if by_data:
                return ModalityDetection(by_data, data_mime)
        by_ext = modality_from_extension(_extension_of(source))
        if by_ext:
            return ModalityDetection(by_ext, _normalize_mime(mime_type))

    if filename:
        by_name = modality_from_extension(posixpath.splitext(filename)[1])
        if by_name:
            return ModalityDetection(by_name, mime_type)

    return ModalityDetection("text", mime_type)
