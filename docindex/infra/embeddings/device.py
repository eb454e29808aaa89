from __future__ import annotations

from functools import lru_cache

_ALIASES = {"gpu": "cuda", "metal": "mps"}


@lru_cache(maxsize=1)
def auto_device() -> str:
    """First available accelerator: CUDA, then Apple MPS, else CPU."""
    import torch

    if torch.cuda.is_available():
        return "cuda"
    mps = getattr(torch.backends, "mps", None)
    if mps is not None and mps.is_available():
        return "mps"
    return "cpu"


def resolve_device(requested: str | None) -> str:
    """Map an EmbeddingConfig.device value to a torch device string.

    "auto" or empty probes the hardware once; "gpu" and "metal" are accepted
    as aliases; anything else (e.g. "cuda:1") is passed through.
    """
    value = (requested or "auto").strip().lower()
    if value == "auto":
        return auto_device()
    return _ALIASES.get(value, value)
