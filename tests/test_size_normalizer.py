from __future__ import annotations

from docindex.domain.segmentation import (
    Chunk,
    Segment,
    SegmentationConfig,
    SizeNormalizer,
    find_split_point,
)
from docindex.infra.splitting.sentence_splitter import RegexSentenceSplitter
from docindex.infra.tokens import WhitespaceTokenCounter

# 80 whitespace tokens, 402 characters
P1 = "Alpha " + "beta " * 78 + "gamma."


def _normalizer(target: int = 150, max_tokens: int = 200, min_tokens: int = 100) -> SizeNormalizer:
    cfg = SegmentationConfig(target_tokens=target, max_tokens=max_tokens, min_tokens=min_tokens)
    splitter = RegexSentenceSplitter()
    return SizeNormalizer(
        cfg, WhitespaceTokenCounter().count_tokens, lambda s: len(splitter.split(s))
    )


def _c(tokens: int, word: str = "w") -> Chunk:
    return Chunk(text=" ".join([word] * tokens), sentence_count=1, token_count=tokens)


def test_split_point_prefers_paragraph_break() -> None:
    text = f"{P1} {P1}\n\n{P1} {P1}"
    at = find_split_point(text)
    assert at is not None
    assert text[:at].strip() == f"{P1} {P1}"
    assert text[at:].strip() == f"{P1} {P1}"


def test_split_point_nearest_sentence_end_to_midpoint() -> None:
    text = " ".join([P1] * 4)
    at = find_split_point(text)
    assert at is not None
    assert text[:at].strip() == f"{P1} {P1}"


def test_split_point_ignores_edges() -> None:
    # the only sentence end sits within 200 chars of the start
    text = ("Alpha " * 20).strip() + ". " + ("beta " * 150).strip()
    assert find_split_point(text) is None
    assert find_split_point("word " * 400) is None


def test_oversized_indivisible_piece_is_kept_unchanged() -> None:
    text = ("word " * 400).strip()
    norm = _normalizer(target=30, max_tokens=50, min_tokens=10)

    chunks = norm.normalize([Segment(text=text, sentence_count=1)])

    assert len(chunks) == 1
    assert chunks[0].text == text
    assert chunks[0].token_count == 400
    assert chunks[0].oversized is True


def test_oversized_segment_is_bisected_in_order() -> None:
    text = " ".join([P1] * 4)
    norm = _normalizer(target=150, max_tokens=200, min_tokens=100)

    chunks = norm.normalize([Segment(text=text, sentence_count=4)])

    assert [c.text for c in chunks] == [f"{P1} {P1}", f"{P1} {P1}"]
    assert [c.token_count for c in chunks] == [160, 160]
    assert [c.sentence_count for c in chunks] == [2, 2]
    assert not any(c.oversized for c in chunks)


def test_accumulate_flushes_at_target() -> None:
    norm = _normalizer(target=150, max_tokens=250, min_tokens=10)
    out = norm.accumulate([_c(100, "a"), _c(100, "b"), _c(100, "c")])
    assert [c.token_count for c in out] == [200, 100]
    assert out[0].text == _c(100, "a").text + " " + _c(100, "b").text
    assert out[0].sentence_count == 2


def test_accumulate_flushes_before_overflow() -> None:
    norm = _normalizer(target=500, max_tokens=200, min_tokens=10)
    out = norm.accumulate([_c(120), _c(100)])
    assert [c.token_count for c in out] == [120, 100]


def test_merge_small_tail_into_predecessor() -> None:
    norm = _normalizer(target=300, max_tokens=400, min_tokens=100)
    big, tail = _c(300, "big"), _c(50, "tail")
    out = norm.merge_small([big, tail])
    assert len(out) == 1
    assert out[0].text == f"{big.text} {tail.text}"
    assert out[0].token_count == 350


def test_merge_small_respects_max() -> None:
    norm = _normalizer(target=300, max_tokens=400, min_tokens=100)
    out = norm.merge_small([_c(380), _c(50)])
    assert [c.token_count for c in out] == [380, 50]


def test_small_first_chunk_stays_standalone() -> None:
    norm = _normalizer(target=300, max_tokens=400, min_tokens=100)
    out = norm.merge_small([_c(50), _c(300)])
    assert [c.token_count for c in out] == [50, 300]


def test_combined_chunks_are_recounted_on_joined_text() -> None:
    # character estimator: joining adds a separator the piece counts do not see
    cfg = SegmentationConfig(target_tokens=10, max_tokens=10, min_tokens=1)
    norm = SizeNormalizer(cfg, len, lambda s: 1)
    pieces = [
        Chunk(text="aaaa", sentence_count=1, token_count=4),
        Chunk(text="bbbb", sentence_count=1, token_count=4),
        Chunk(text="cc", sentence_count=1, token_count=2),
    ]

    out = norm.assemble(pieces)

    assert [c.text for c in out] == ["aaaa bbbb", "cc"]
    assert [c.token_count for c in out] == [9, 2]
    assert all(len(c.text) <= cfg.max_tokens for c in out)


def test_group_reports_piece_indices() -> None:
    norm = _normalizer(target=150, max_tokens=250, min_tokens=60)
    assert norm.group([_c(100), _c(100), _c(20), _c(100)]) == [[0, 1], [2, 3]]
