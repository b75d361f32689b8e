# tests/test_row_classifier.py

from voucher_scan.extraction.config import ExtractionConfig
from voucher_scan.extraction.row_classifier import (
    LineKind,
    classify_line,
    flag_nearby,
    has_ignore_keyword,
    has_total_context_nearby,
    has_total_keyword,
    is_table_header,
    is_true_total,
)


def test_total_keywords_multilingual():
    assert has_total_keyword("Grand Total: 50.00")
    assert has_total_keyword("الإجمالي 44800")
    assert has_total_keyword("Gesamtsumme 12,50")
    assert has_total_keyword("Valor total 300")
    assert not has_total_keyword("Apples 3.50")


def test_ascii_keywords_need_word_boundaries():
    assert has_ignore_keyword("Tel: 0123 456")
    assert not has_ignore_keyword("Hotel Paradise")
    assert not has_total_keyword("Totality 5")


def test_keyword_may_touch_digits():
    assert has_total_keyword("Total12.50")


def test_header_precedence():
    line = "Total Price"
    assert has_total_keyword(line)
    assert is_table_header(line)
    assert not is_true_total(line)
    assert classify_line(line) == LineKind.HEADER


def test_arabic_header_row():
    line = "نوع الصنف | الحجم | العدد | السعر | الإجمالي"
    assert is_table_header(line)
    assert not is_true_total(line)


def test_single_header_word_needs_company():
    assert not is_table_header("Price 50")
    assert is_table_header("Qty Price")
    assert is_table_header("Qty Price", ExtractionConfig(header_min_matches=2))
    assert not is_table_header("Qty Price", ExtractionConfig(header_min_matches=3))


def test_classify_line():
    assert classify_line("الإجمالي 44800") == LineKind.TOTAL
    assert classify_line("ضريبة القيمة المضافة 14%") == LineKind.IGNORE
    assert classify_line("VAT 14% 1.20") == LineKind.IGNORE
    assert classify_line("Apples 3.50") == LineKind.PLAIN


def test_total_context_nearby():
    lines = ["Total", "", "12.00", "Thanks"]
    assert has_total_context_nearby(0, lines)
    assert has_total_context_nearby(2, lines)
    assert not has_total_context_nearby(3, lines)
    assert has_total_context_nearby(3, lines, window=3)


def test_header_gives_no_context():
    assert not has_total_context_nearby(1, ["Total Price", "12.00"])


def test_flag_nearby_bounds():
    assert not flag_nearby([], 0)
    assert not flag_nearby([True], 5)
    assert not flag_nearby([True], -1)
    assert flag_nearby([False, False, True], 0, window=2)
    assert not flag_nearby([False, False, True], 0, window=1)
