from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from docindex.application.ports.embeddings_port import EmbeddingsPort
from docindex.application.ports.vector_store_port import VectorStorePort
from docindex.core.exceptions import DocIndexError, wrap_error
from docindex.domain.chunking import SemanticChunker, embed_in_batches
from docindex.domain.retrieval import VectorRecord, content_hash
from docindex.domain.structural import chunk_code, chunk_markdown, detect_language

log = logging.getLogger(__name__)

_MARKDOWN_SUFFIXES = (".md", ".markdown", ".mdx")


@dataclass
class IndexDocumentUseCase:
    chunker: SemanticChunker
    embedder: EmbeddingsPort
    vector_store: VectorStorePort
    embedding_sig: str | None = None

    def execute(
        self,
        text: str,
        *,
        resource_id: str,
        source: str = "",
        filename: str | None = None,
    ) -> int:
        """Chunk, embed and upsert one document.

        1) Code files are split at definitions; prose is chunked semantically,
           Markdown section by section with sizing across section borders
        2) Chunk texts are embedded in batches of ``embedding_batch_size``
        3) Records are upserted only after every embedding succeeded
        Returns number of stored records.
        """
        pieces = self._split(text, filename)
        if not pieces:
            return 0

        texts = [t for t, _md in pieces]
        vectors = embed_in_batches(
            self.embedder.embed_documents,
            texts,
            self.chunker.cfg.embedding_batch_size,
            what=f"chunks of {resource_id}",
        )

        records: list[VectorRecord] = []
        for idx, ((chunk_text, extra), vec) in enumerate(zip(pieces, vectors, strict=True)):
            md: dict[str, Any] = {
                "type": "doc",
                "resource_id": resource_id,
                "source": source,
                "content": chunk_text,
                "chunk_index": idx,
                "content_hash": content_hash(chunk_text),
                **extra,
            }
            if self.embedding_sig:
                md["embedding_sig"] = self.embedding_sig
            # vector databases reject null metadata values
            md = {k: v for k, v in md.items() if v is not None}
            records.append(VectorRecord(id=f"{resource_id}:{idx}", values=vec, metadata=md))

        try:
            self.vector_store.upsert(records)
        except DocIndexError:
            raise
        except Exception as e:
            raise wrap_error(e, f"Failed to upsert {len(records)} records for {resource_id}") from e
        log.info("Indexed %s: %d chunks", resource_id, len(records))
        return len(records)

    def _split(self, text: str, filename: str | None) -> list[tuple[str, dict[str, Any]]]:
        name = (filename or "").lower()
        language = detect_language(name) if name else None
        out: list[tuple[str, dict[str, Any]]] = []
        md: dict[str, Any]

        if language is not None:
            for c in chunk_code(text, language):
                md = {"language": c.language, "start_line": c.start_line, "end_line": c.end_line}
                out.append((c.text, md))
        elif name.endswith(_MARKDOWN_SUFFIXES):
            sections = chunk_markdown(text)
            for ch, covered in self.chunker.chunk_sections([s.text for s in sections]):
                first, last = sections[covered[0]], sections[covered[-1]]
                md = {
                    "header": first.header,
                    "start_line": first.start_line,
                    "end_line": last.end_line,
                    "sentence_count": ch.sentence_count,
                    "token_count": ch.token_count,
                }
                out.append((ch.text, md))
        else:
            for ch in self.chunker.chunk(text):
                md = {"sentence_count": ch.sentence_count, "token_count": ch.token_count}
                out.append((ch.text, md))

        return [(t, md) for t, md in out if t.strip()]
