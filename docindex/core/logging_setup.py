from __future__ import annotations

import logging

from rich.logging import RichHandler

# HTTP and model-loading chatter from the embedding backends
_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "openai", "sentence_transformers")


def setup_logging(level: int = logging.INFO) -> None:
    """Route all logs through rich; backend client loggers stay at WARNING or above."""
    logging.basicConfig(
        level=level,
        format="%(name)s | %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, markup=False, show_path=False)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
