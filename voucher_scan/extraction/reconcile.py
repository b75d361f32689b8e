# voucher_scan/extraction/reconcile.py
from typing import Iterable, Optional

from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig


def reconcile(amounts: Iterable[float], config: ExtractionConfig = DEFAULT_CONFIG) -> Optional[dict]:
    """
    Decide between "largest amount is already the total" and "the total row was
    lost, add the line items up".

    amounts: every plausible amount found on the document
    Returns None when neither reading is convincing.
    """
    in_range = [
        a for a in amounts
        if config.disambiguation_min_amount <= a <= config.disambiguation_max_amount
    ]
    if not in_range:
        return None

    largest = max(in_range)
    computed_total = sum(in_range)
    others_total = computed_total - largest

    result = {
        "largest": largest,
        "computed_total": computed_total,
        "others_total": others_total,
        "count": len(in_range),
    }

    # largest already covers the rest -> it is the aggregate
    if largest >= config.dominant_ratio * others_total:
        result.update(choice="max_as_total", amount=largest, confidence=config.max_as_total_confidence)
        return result

    # items clearly add up to more than any single one -> rebuild the total
    if computed_total > config.sum_ratio * largest and computed_total <= config.disambiguation_max_amount:
        result.update(choice="sum_of_items", amount=computed_total, confidence=config.sum_confidence)
        return result

    return None
