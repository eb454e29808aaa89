from __future__ import annotations

import json
import logging
import statistics
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from docindex.domain.segmentation import Chunk

log = logging.getLogger(__name__)


def chunking_stats(
    chunks: Iterable[Chunk], *, name: str, min_tokens: int, max_tokens: int
) -> dict[str, Any] | None:
    """Token statistics for one document's chunks, or None when there are none."""
    chunk_list = list(chunks)
    lengths = [c.token_count for c in chunk_list]
    if not lengths:
        return None
    return {
        "doc": name,
        "chunks": len(lengths),
        "mean": statistics.fmean(lengths),
        "p50": statistics.median(lengths),
        "p90": statistics.quantiles(lengths, n=10)[8] if len(lengths) >= 10 else max(lengths),
        "max": max(lengths),
        "within_min_max": sum(min_tokens <= n <= max_tokens for n in lengths) / len(lengths),
        "oversized": sum(1 for c in chunk_list if c.oversized),
        "ts": int(time.time()),
    }


def log_chunking_stats(
    chunks: Iterable[Chunk],
    *,
    name: str,
    min_tokens: int,
    max_tokens: int,
    log_dir: Path | None = None,
) -> dict[str, Any] | None:
    """Log per-document chunking stats and append them to ``log_dir`` as JSON lines."""
    stats = chunking_stats(chunks, name=name, min_tokens=min_tokens, max_tokens=max_tokens)
    if stats is None:
        return None
    log.info("Chunking stats: %s", stats)
    if log_dir is not None:
        path = Path(log_dir) / "chunking_stats.jsonl"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(stats, ensure_ascii=False) + "\n")
        except OSError as e:
            log.warning("Could not write chunking stats to %s: %s", path, e)
    return stats
