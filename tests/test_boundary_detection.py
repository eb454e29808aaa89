from __future__ import annotations

import random

import pytest

from docindex.domain.segmentation import (
    MIN_SENTENCES_PER_SEGMENT,
    build_segments,
    consecutive_similarities,
    cosine,
    detect_breakpoints,
    similarity_threshold,
    smooth,
)


def test_cosine_handles_zero_vector() -> None:
    assert cosine([0.0, 0.0], [1.0, 0.0]) == 0.0
    assert cosine([1.0, 0.0], [2.0, 0.0]) == pytest.approx(1.0)


def test_smooth_clips_window_at_edges() -> None:
    assert smooth([1, 2, 3, 4, 5], 1) == pytest.approx([1.5, 2.0, 3.0, 4.0, 4.5])
    assert smooth([1, 2, 3], 0) == [1, 2, 3]


def test_threshold_flat_series_uses_fixed_offset() -> None:
    assert similarity_threshold([0.5, 0.5, 0.5], 1.0) == pytest.approx(0.45)


def test_threshold_is_clamped() -> None:
    # mean - 3*std = -3 -> clamped to -1
    assert similarity_threshold([1.0, -1.0], 3.0) == -1.0
    # flat at -1 -> mean - 0.05 would fall below -1
    assert similarity_threshold([-1.0, -1.0], 1.0) == -1.0


def test_topic_drop_yields_single_breakpoint_and_two_segments() -> None:
    sentences = ["One.", "Two.", "Three.", "Four."]
    vectors = [[1.0, 0.0], [1.0, 0.0], [0.0, 1.0], [0.0, 1.0]]

    bps = detect_breakpoints(vectors, radius=0)

    assert bps == [2]
    segments = build_segments(sentences, bps)
    assert [s.text for s in segments] == ["One. Two.", "Three. Four."]
    assert [s.sentence_count for s in segments] == [2, 2]


def test_flat_similarity_has_no_breakpoints() -> None:
    vectors = [[1.0, 0.0]] * 8
    assert detect_breakpoints(vectors) == []


def test_too_few_sentences() -> None:
    assert detect_breakpoints([]) == []
    assert detect_breakpoints([[1.0], [0.0], [1.0]], radius=0) == []


@pytest.mark.parametrize("seed", [1, 7, 42, 123])
def test_breakpoint_spacing(seed: int) -> None:
    rng = random.Random(seed)
    vectors = [[rng.gauss(0, 1) for _ in range(8)] for _ in range(40)]

    bps = detect_breakpoints(vectors, radius=1, drop_threshold=0.1)

    assert bps == sorted(set(bps))
    prev = 0
    for b in bps:
        assert b - prev >= MIN_SENTENCES_PER_SEGMENT
        prev = b
    if bps:
        assert len(vectors) - bps[-1] >= MIN_SENTENCES_PER_SEGMENT


def test_drop_rule_fires_without_threshold() -> None:
    # a sharp drop that stays above the statistical threshold still breaks
    sims_vectors = [[1.0, 0.0], [1.0, 0.0], [1.0, 0.0], [0.6, 0.8], [0.6, 0.8], [0.6, 0.8]]
    sims = consecutive_similarities(sims_vectors)
    assert sims[2] == pytest.approx(0.6)
    bps = detect_breakpoints(sims_vectors, radius=0, std_multiplier=5.0, drop_threshold=0.25)
    assert bps == [3]


def test_build_segments_without_breakpoints() -> None:
    segments = build_segments(["A.", "B.", "C."], [])
    assert len(segments) == 1
    assert segments[0].text == "A. B. C."
    assert segments[0].sentence_count == 3
