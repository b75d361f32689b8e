# tests/test_scoring.py

import pytest

from voucher_scan.extraction.config import ConfidenceWeights
from voucher_scan.extraction.scoring import calculate_confidence, context_quality


def test_context_quality_ordering():
    assert context_quality(True, True, True) == 1.0
    assert context_quality(False, True, True) == 0.8
    assert context_quality(False, False, True) == 0.3
    assert context_quality(False, False, False) == 0.2


def test_strong_total_is_clamped_to_one():
    assert calculate_confidence(True, True, 44800, 1.0) == 1.0


def test_no_signal_small_amount():
    assert calculate_confidence(False, False, 50, 0.2) == pytest.approx(0.32)


def test_magnitude_bonus_steps():
    small = calculate_confidence(False, True, 50, 0.2)
    medium = calculate_confidence(False, True, 500, 0.2)
    large = calculate_confidence(False, True, 5000, 0.2)
    assert small == pytest.approx(0.42)
    assert medium == pytest.approx(0.47)
    assert large == pytest.approx(0.52)


def test_keyword_is_the_dominant_term():
    with_keyword = calculate_confidence(True, False, 50, 0.8)
    without = calculate_confidence(False, True, 5000, 1.0)
    assert with_keyword > without


def test_custom_weights_are_clamped():
    weights = ConfidenceWeights(base=-5.0)
    assert calculate_confidence(True, True, 5000, 1.0, weights) == 0.0
