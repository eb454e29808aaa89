from __future__ import annotations

import pytest

from docindex.domain.scoring import (
    modality_confidence,
    modality_weights,
    normalize_scores,
    pair_weights,
    softmax,
)


def test_normalize_flat_nonzero_is_all_ones() -> None:
    assert normalize_scores([10, 10, 10]) == [1.0, 1.0, 1.0]


def test_normalize_all_zero_is_all_zero() -> None:
    assert normalize_scores([0, 0, 0]) == [0.0, 0.0, 0.0]


def test_normalize_min_max() -> None:
    assert normalize_scores([0.2, 0.6, 1.0]) == pytest.approx([0.0, 0.5, 1.0])
    assert normalize_scores([]) == []


def test_confidence_is_top_k_mean() -> None:
    scores = [0.1, 1.0, 0.5, 0.9, 0.0, 0.3, 0.8]
    assert modality_confidence(scores, top_k=3) == pytest.approx((1.0 + 0.9 + 0.8) / 3)
    # k larger than the list uses everything available
    assert modality_confidence([1.0, 0.5], top_k=5) == pytest.approx(0.75)
    assert modality_confidence([], top_k=5) == 0.0


def test_weights_both_empty_are_uniform() -> None:
    assert pair_weights(None, None) == (0.5, 0.5)


def test_weights_one_empty() -> None:
    assert pair_weights(0.7, None) == (1.0, 0.0)
    assert pair_weights(None, 0.2) == (0.0, 1.0)


@pytest.mark.parametrize("ca,cb", [(0.0, 0.0), (0.5, 1.0), (1.0, 0.1), (0.33, 0.34)])
def test_weights_sum_to_one(ca: float, cb: float) -> None:
    wa, wb = pair_weights(ca, cb)
    assert wa + wb == pytest.approx(1.0)
    assert (wa > wb) == (ca > cb)


def test_softmax_is_numerically_stable() -> None:
    assert softmax([1000.0, 1000.0]) == pytest.approx([0.5, 0.5])
    assert softmax([1000.0, 0.0])[0] == pytest.approx(1.0)


def test_weights_for_many_modalities() -> None:
    weights = modality_weights([0.9, None, 0.4, 0.4])
    assert weights[1] == 0.0
    assert sum(weights) == pytest.approx(1.0)
    assert weights[2] == pytest.approx(weights[3])
    assert modality_weights([None, None, None]) == pytest.approx([1 / 3] * 3)
