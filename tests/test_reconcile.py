# tests/test_reconcile.py

from voucher_scan.extraction.config import ExtractionConfig
from voucher_scan.extraction.reconcile import reconcile


def test_largest_already_covers_the_rest():
    result = reconcile([12000, 5000, 4000])
    assert result["choice"] == "max_as_total"
    assert result["amount"] == 12000
    assert result["confidence"] == 0.7
    assert result["others_total"] == 9000


def test_small_amounts_are_out_of_range():
    # 500/300/200 never enter the comparison
    result = reconcile([12000, 500, 300, 200])
    assert result["choice"] == "max_as_total"
    assert result["count"] == 1


def test_items_are_summed_when_no_total_was_read():
    result = reconcile([5000, 4000, 3000])
    assert result["choice"] == "sum_of_items"
    assert result["amount"] == 12000
    assert result["confidence"] == 0.6
    assert result["largest"] == 5000


def test_sum_above_range_is_rejected():
    assert reconcile([60000, 50000, 40000]) is None


def test_nothing_in_range():
    assert reconcile([]) is None
    assert reconcile([500, 300]) is None
    assert reconcile([250000]) is None


def test_thresholds_come_from_config():
    cfg = ExtractionConfig().with_overrides(dominant_ratio=2.0)
    result = reconcile([12000, 8000], cfg)
    assert result["choice"] == "sum_of_items"
    assert result["amount"] == 20000
