from __future__ import annotations

# ruff: noqa: B008

"""Thin CLI over the segmentation and fusion pipelines.

Commands:
- chunk: split a text file into semantic, token-bounded chunks
- fuse: fuse two JSON result lists (text, image) into one ranking
- detect: print the modality detected for a path, URL or data URI
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer

from docindex.core.logging_setup import setup_logging
from docindex.core.settings import (
    EmbeddingConfig,
    FusionSettings,
    SegmentationSettings,
    TokenizerSettings,
)
from docindex.domain.fusion import fuse_results
from docindex.domain.modality import detect_modality
from docindex.domain.retrieval import ScoredItem
from docindex.infra.embeddings import build_embeddings
from docindex.infra.metrics.chunking import log_chunking_stats
from docindex.infra.splitting import build_chunker
from docindex.infra.tokens import build_token_counter

app = typer.Typer(add_completion=False, no_args_is_help=True, help="docindex tools")


def _load_items(path: Path) -> list[ScoredItem]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise typer.BadParameter(f"{path} must contain a JSON list of results")
    items: list[ScoredItem] = []
    for entry in raw:
        items.append(
            ScoredItem(
                id=str(entry["id"]),
                score=float(entry["score"]),
                metadata=dict(entry.get("metadata") or {}),
            )
        )
    return items


@app.command("chunk")
def chunk_cmd(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="UTF-8 text file"),
    provider: str = typer.Option("dummy", help="Embeddings provider: huggingface|openai|dummy"),
    model: str = typer.Option(None, help="Embedding model name"),
    tokenizer: str = typer.Option(None, help="Token estimator: tiktoken|whitespace"),
    target: int = typer.Option(None, help="Target tokens per chunk"),
    max_tokens: int = typer.Option(None, "--max", help="Maximum tokens per chunk"),
    min_tokens: int = typer.Option(None, "--min", help="Minimum tokens per chunk"),
    stats_dir: Path = typer.Option(None, help="Append chunking stats (JSONL) here"),
    as_json: bool = typer.Option(False, "--json", help="Print chunks as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    overrides: dict[str, Any] = {}
    if target is not None:
        overrides["target_tokens"] = target
    if max_tokens is not None:
        overrides["max_tokens"] = max_tokens
    if min_tokens is not None:
        overrides["min_tokens"] = min_tokens
    seg = SegmentationSettings(**overrides)
    tok = TokenizerSettings(**({"backend": tokenizer} if tokenizer else {}))

    emb_cfg = EmbeddingConfig(provider=provider)  # type: ignore[arg-type]
    if model:
        emb_cfg = emb_cfg.model_copy(update={"model_name": model})

    chunker = build_chunker(build_embeddings(emb_cfg), build_token_counter(tok), seg)
    chunks = chunker.chunk(path.read_text(encoding="utf-8"))
    log_chunking_stats(
        chunks,
        name=path.name,
        min_tokens=seg.min_tokens,
        max_tokens=seg.max_tokens,
        log_dir=stats_dir,
    )

    if as_json:
        payload = [
            {
                "index": i,
                "text": c.text,
                "sentence_count": c.sentence_count,
                "token_count": c.token_count,
                "oversized": c.oversized,
            }
            for i, c in enumerate(chunks, 1)
        ]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        raise typer.Exit()

    for i, c in enumerate(chunks, 1):
        flag = " OVERSIZED" if c.oversized else ""
        typer.echo(f"[{i}] sentences={c.sentence_count} tokens={c.token_count}{flag}")
        text = c.text.replace("\n", " ")
        if len(text) > 300:
            text = text[:300] + "..."
        typer.echo("     " + text)


@app.command("fuse")
def fuse_cmd(
    text_results: Path = typer.Argument(..., exists=True, dir_okay=False),
    image_results: Path = typer.Argument(..., exists=True, dir_okay=False),
    limit: int = typer.Option(None, help="Maximum number of fused results"),
    top_k: int = typer.Option(None, help="Top-k used for modality confidence"),
) -> None:
    cfg = FusionSettings()
    fused = fuse_results(
        _load_items(text_results),
        _load_items(image_results),
        limit=limit if limit is not None else cfg.result_limit,
        top_k=top_k if top_k is not None else cfg.top_k_for_confidence,
    )
    payload = [
        {
            "id": r.id,
            "score": r.score,
            "metadata": dict(r.metadata),
            "modalities": list(r.modalities),
        }
        for r in fused
    ]
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("detect")
def detect_cmd(
    source: str = typer.Argument(..., help="Path, URL or data URI"),
    mime_type: str = typer.Option(None, "--mime", help="Explicit MIME type"),
) -> None:
    result = detect_modality(source, mime_type=mime_type)
    if result.mime_type is None:
        typer.echo(result.modality)
    else:
        typer.echo(f"{result.modality} {result.mime_type}")


def main() -> int:
    try:
        app()
        return 0
    except Exception as e:  # noqa: BLE001
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        return 1


if __name__ == "__main__":
    sys.exit(main())
