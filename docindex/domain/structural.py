"""Line-structured chunkers for source code, Markdown and plain word windows."""

from __future__ import annotations

import re
from dataclasses import dataclass

SLIDING_WINDOW_SIZE = 1000  # words
SLIDING_WINDOW_OVERLAP = 200

_FUNCTION_RES = (
    re.compile(r"^\s*(export\s+)?(async\s+)?function\s+\w+"),
    re.compile(r"^\s*(export\s+)?const\s+\w+\s*=\s*(async\s+)?\("),
    re.compile(r"^\s*(export\s+)?\w+\s*:\s*(async\s+)?\("),
    re.compile(r"^\s*(async\s+)?def\s+\w+"),
)
_CLASS_RES = (
    re.compile(r"^\s*(export\s+)?class\s+\w+"),
    re.compile(r"^\s*(export\s+)?interface\s+\w+"),
    re.compile(r"^\s*(export\s+)?type\s+\w+"),
)
_HEADER_RE = re.compile(r"^(#{1,3})\s+(.+)$")

_LANGUAGES = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "go": "go",
    "rs": "rust",
    "rb": "ruby",
    "php": "php",
    "swift": "swift",
    "kt": "kotlin",
    "scala": "scala",
    "sh": "bash",
    "html": "html",
    "css": "css",
    "sql": "sql",
}


@dataclass(frozen=True)
class TextChunk:
    text: str
    start_line: int | None = None  # 1-based, inclusive
    end_line: int | None = None
    language: str | None = None
    header: str | None = None


def is_definition(line: str) -> bool:
    return any(r.match(line) for r in _FUNCTION_RES) or any(r.match(line) for r in _CLASS_RES)


def chunk_code(content: str, language: str | None = None) -> list[TextChunk]:
    """Start a new chunk at every function/class/interface/type definition."""
    lines = content.split("\n")
    chunks: list[TextChunk] = []
    current: list[str] = []
    start = 0
    for i, line in enumerate(lines):
        if is_definition(line) and current:
            chunks.append(TextChunk("\n".join(current), start + 1, i, language))
            current = [line]
            start = i
        else:
            current.append(line)
    if current:
        chunks.append(TextChunk("\n".join(current), start + 1, len(lines), language))
    return chunks or [TextChunk(content, language=language)]


def chunk_markdown(content: str) -> list[TextChunk]:
    lines = content.split("\n")
    chunks: list[TextChunk] = []
    current: list[str] = []
    header: str | None = None
    start = 0
    for i, line in enumerate(lines):
        m = _HEADER_RE.match(line)
        if m:
            if current:
                chunks.append(TextChunk("\n".join(current), start + 1, i, header=header))
            header = m.group(2)
            current = [line]
            start = i
        else:
            current.append(line)
    if current:
        chunks.append(TextChunk("\n".join(current), start + 1, len(lines), header=header))
    return chunks or [TextChunk(content)]


def chunk_text(
    content: str,
    window: int = SLIDING_WINDOW_SIZE,
    overlap: int = SLIDING_WINDOW_OVERLAP,
) -> list[TextChunk]:
    """Sliding word window with ``overlap`` words shared between neighbours."""
    if window <= 0 or not 0 <= overlap < window:
        raise ValueError("need window > 0 and 0 <= overlap < window")
    words = content.split()
    chunks: list[TextChunk] = []
    step = window - overlap
    for i in range(0, len(words), step):
        chunks.append(TextChunk(" ".join(words[i : i + window])))
        if i + window >= len(words):
            break
    return chunks or [TextChunk(content)]


def detect_language(filename: str) -> str | None:
    if "." not in filename:
        return None
    ext = filename.rsplit(".", 1)[-1].lower()
    return _LANGUAGES.get(ext)
