# voucher_scan/extraction/currency.py
import re
from functools import lru_cache
from typing import List, Optional, Tuple

from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig
from voucher_scan.extraction.digits import contains_arabic


@lru_cache(maxsize=16)
def _compile_rules(patterns: Tuple[Tuple[str, str], ...]) -> List[Tuple[re.Pattern, str]]:
    return [(re.compile(p, re.IGNORECASE), code) for p, code in patterns]


def detect_currency(text: str, config: ExtractionConfig = DEFAULT_CONFIG, default: Optional[str] = None) -> str:
    """
    First matching (pattern, code) rule wins.
    With no match: `default` if given, else a script-aware default
    (Arabic text -> arabic_default_currency, anything else -> default_currency).
    """
    text = text or ""
    for pattern, code in _compile_rules(tuple(config.currency_patterns)):
        if pattern.search(text):
            return code
    if default:
        return default
    if contains_arabic(text):
        return config.arabic_default_currency
    return config.default_currency


def format_currency(amount: float, currency: str) -> str:
    return f"{amount:,.2f} {currency}"
