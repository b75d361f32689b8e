# tests/test_number_parser.py

import pytest

from voucher_scan.extraction.config import ExtractionConfig
from voucher_scan.extraction.models import NumberToken
from voucher_scan.extraction.number_parser import (
    has_thousands_indicator,
    parse_amount,
    parse_numbers,
    pick_line_amount,
    split_columns,
    split_fused_token,
    to_float,
)


def values(line):
    return [t.value for t in parse_numbers(line)]


# ---------------------------
# Column fusion / thousands merge
# ---------------------------
def test_column_separator_is_never_crossed():
    tokens = parse_numbers("40 550 |22000")
    assert [t.value for t in tokens] == [40, 550, 22000]
    assert 40550 not in [t.value for t in tokens]
    assert pick_line_amount(tokens).value == 22000


def test_spaced_thousands_merge():
    assert values("50 300") == [50300]


def test_three_groups_are_not_merged():
    assert values("20 380 7600") == [20, 380, 7600]


def test_wide_gap_splits_columns():
    assert values("Apples     12.50") == [12.5]
    assert split_columns("5   40 - 550 | 22000") == ["5", "40", "550", "22000"]


# ---------------------------
# Separators
# ---------------------------
@pytest.mark.parametrize("raw, expected", [
    ("1,234.56", 1234.56),
    ("1.234,56", 1234.56),
    ("12,50", 12.5),
    ("12.50", 12.5),
    ("1,500", 1500),
    ("1.000.000", 1000000),
    ("0,500", 0.5),
    ("44800", 44800),
])
def test_to_float(raw, expected):
    assert to_float(raw) == pytest.approx(expected)


def test_to_float_empty():
    assert to_float("") is None


# ---------------------------
# Units, digits, thousands
# ---------------------------
def test_currency_symbol_and_words_are_stripped():
    assert values("Total: €1,234.56") == [1234.56]
    assert values("44,800 EGP") == [44800]
    assert values("500 جنيه") == [500]


def test_arabic_digits_are_normalized():
    assert values("الإجمالي ٤٤٨٠٠") == [44800]


def test_thousands_indicator_multiplies_small_tokens():
    assert values("45 ألف") == [45000]
    assert values("44800 ألف") == [44800]
    assert values("12 thousand") == [12000]


def test_has_thousands_indicator():
    assert has_thousands_indicator("الإجمالي 44800 ألف")
    assert has_thousands_indicator("44800ألف")
    assert not has_thousands_indicator("Total 12.50")
    assert not has_thousands_indicator("")


def test_no_digits_gives_no_tokens():
    for line in ["Total amount", "شكرا لزيارتكم", "|||---...", "", None]:
        assert parse_numbers(line) == []


def test_line_index_is_kept():
    tokens = parse_numbers("12.50", line_index=7)
    assert tokens[0].line_index == 7


# ---------------------------
# OCR merge correction
# ---------------------------
def test_fused_price_and_total_are_split():
    assert values("3804800") == [380, 4800]


def test_eight_digit_runs_stay_whole():
    assert values("12345678") == [12345678]


def test_split_requires_plausible_prefix():
    token = NumberToken(9904800.0, "9904800")
    assert [t.value for t in split_fused_token(token)] == [990, 4800]
    token = NumberToken(1504800.0, "1504800")
    assert [t.value for t in split_fused_token(token)] == [150, 4800]
    token = NumberToken(5000000.0, "5000000")
    assert split_fused_token(token) == [token]     # suffix 0000 < 1000


def test_split_ignores_separated_runs():
    token = NumberToken(1234567.0, "1,234,567")
    assert split_fused_token(token) == [token]


def test_split_respects_config():
    cfg = ExtractionConfig(merge_max_digits=6)
    token = NumberToken(3804800.0, "3804800")
    assert split_fused_token(token, cfg) == [token]


# ---------------------------
# Selection helpers
# ---------------------------
def test_pick_line_amount_prefers_large_rightmost():
    tokens = [NumberToken(v, str(v)) for v in (5, 40, 1200, 550, 22000)]
    assert pick_line_amount(tokens).value == 22000


def test_pick_line_amount_falls_back_to_first():
    tokens = [NumberToken(v, str(v)) for v in (5, 40)]
    assert pick_line_amount(tokens).value == 5


def test_pick_line_amount_skips_implausible():
    tokens = [NumberToken(2_000_000, "2000000"), NumberToken(500, "500")]
    assert pick_line_amount(tokens).value == 500
    assert pick_line_amount([]) is None


def test_parse_amount():
    assert parse_amount("44,800 EGP") == 44800
    assert parse_amount("Phone 0123456789") is None
    assert parse_amount("") is None
