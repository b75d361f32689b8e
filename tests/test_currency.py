# tests/test_currency.py

import pytest

from voucher_scan.extraction.config import ExtractionConfig
from voucher_scan.extraction.currency import detect_currency, format_currency


@pytest.mark.parametrize("text, code", [
    ("Total E£ 500", "EGP"),
    ("Total 500 L.E", "EGP"),
    ("المبلغ 500 جنيه", "EGP"),
    ("£ 12.00", "GBP"),
    ("US$ 10", "USD"),
    ("$10", "USD"),
    ("1.000 CVE", "CVE"),
    ("$10 escudos", "CVE"),
    ("Summe 10,00 €", "EUR"),
    ("Total 20 AED", "AED"),
])
def test_first_matching_rule_wins(text, code):
    assert detect_currency(text) == code


def test_script_aware_default():
    assert detect_currency("الإجمالي 500") == "EGP"
    assert detect_currency("Total 500") == "EUR"
    assert detect_currency("") == "EUR"
    assert detect_currency(None) == "EUR"


def test_explicit_default_beats_script_default():
    assert detect_currency("الإجمالي 500", default="USD") == "USD"
    # a rule match still wins over the default
    assert detect_currency("Total 5 €", default="USD") == "EUR"


def test_defaults_come_from_config():
    cfg = ExtractionConfig(default_currency="CVE", arabic_default_currency="SAR")
    assert detect_currency("Total 500", cfg) == "CVE"
    assert detect_currency("المجموع 500", cfg) == "SAR"


def test_custom_rule_table():
    cfg = ExtractionConfig(currency_patterns=((r"\bKES\b|KSh", "KES"),))
    assert detect_currency("Total KSh 1,200", cfg) == "KES"
    assert detect_currency("Total 5 €", cfg) == "EUR"


def test_format_currency():
    assert format_currency(44800, "EGP") == "44,800.00 EGP"
    assert format_currency(11.6, "EUR") == "11.60 EUR"
