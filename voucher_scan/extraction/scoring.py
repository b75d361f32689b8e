# voucher_scan/extraction/scoring.py
from voucher_scan.extraction.config import ConfidenceWeights

DEFAULT_WEIGHTS = ConfidenceWeights()


def context_quality(
    has_thousands: bool,
    has_total_context: bool,
    is_header: bool,
    weights: ConfidenceWeights = DEFAULT_WEIGHTS,
) -> float:
    """thousands marker > true total keyword > header keyword > nothing"""
    if has_thousands:
        return weights.thousands_quality
    if has_total_context:
        return weights.total_quality
    if is_header:
        return weights.header_quality
    return weights.no_signal_quality


def calculate_confidence(
    has_keyword: bool,
    is_near_end: bool,
    amount: float,
    quality: float,
    weights: ConfidenceWeights = DEFAULT_WEIGHTS,
) -> float:
    """
    Additive score clamped to [0, 1].

    has_keyword: a strong total indicator (true total keyword nearby or a
        thousands marker). This is the dominant term.
    is_near_end: the line is among the last few lines of the document.
    quality: output of context_quality().
    """
    confidence = weights.base

    if has_keyword:
        confidence += weights.keyword_bonus

    if is_near_end:
        confidence += weights.position_bonus

    if amount > 1000:
        confidence += weights.large_amount_bonus
    elif amount > 100:
        confidence += weights.medium_amount_bonus

    confidence += quality * weights.context_weight

    return max(0.0, min(confidence, 1.0))
