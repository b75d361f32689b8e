# voucher_scan/extraction/config.py
"""
Immutable configuration for the amount extraction engine.

All keyword tables, the currency rule table and the numeric thresholds live
here. The engine receives one ExtractionConfig at construction and keeps no
other state, so two configs (e.g. per locale) can run side by side.
"""
import json
from pathlib import Path
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from voucher_scan.extraction import keyword_tables


class ConfidenceWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    base: float = 0.3
    keyword_bonus: float = 0.5
    position_bonus: float = 0.1
    large_amount_bonus: float = 0.1   # amount > 1000
    medium_amount_bonus: float = 0.05  # amount > 100
    context_weight: float = 0.1

    # context quality levels, strongest first
    thousands_quality: float = 1.0
    total_quality: float = 0.8
    header_quality: float = 0.3
    no_signal_quality: float = 0.2


class ExtractionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_keywords: Tuple[str, ...] = keyword_tables.TOTAL_KEYWORDS
    header_keywords: Tuple[str, ...] = keyword_tables.HEADER_KEYWORDS
    ignore_keywords: Tuple[str, ...] = keyword_tables.IGNORE_KEYWORDS
    thousands_words: Tuple[str, ...] = keyword_tables.THOUSANDS_WORDS
    unit_words: Tuple[str, ...] = keyword_tables.UNIT_WORDS
    currency_symbols: str = keyword_tables.CURRENCY_SYMBOLS
    currency_patterns: Tuple[Tuple[str, str], ...] = keyword_tables.CURRENCY_PATTERNS

    default_currency: str = Field("EUR", min_length=1)
    arabic_default_currency: str = Field("EGP", min_length=1)

    # amounts above this are phone/registration numbers misread as totals
    max_amount: float = 1_000_000
    header_min_matches: int = 2
    header_lookahead_lines: int = 12
    # drop payment/change/date rows inside the lookahead window
    lookahead_skip_ignored: bool = True
    nearby_window: int = 2
    tail_lines: int = 5
    preferred_min_amount: float = 1000
    thousands_multiplier: float = 1000

    # OCR merge correction (unit price fused with line total)
    merge_min_value: float = 100_000
    merge_min_digits: int = 6
    # 8+ digit runs are phone/registration numbers, never fused amounts
    merge_max_digits: int = 7
    merge_prefix_min: int = 100
    merge_prefix_max: int = 999
    merge_suffix_min: int = 1000

    header_confidence: float = 0.95
    tail_confidence: float = 0.4
    weights: ConfidenceWeights = ConfidenceWeights()

    # Arabic-receipt sum-vs-max disambiguation.
    # Empirically tuned; recalibrate against a labelled corpus.
    disambiguation_currencies: Tuple[str, ...] = ("EGP",)
    disambiguation_min_amount: float = 1000
    disambiguation_max_amount: float = 100_000
    dominant_ratio: float = 0.8
    sum_ratio: float = 1.5
    max_as_total_confidence: float = 0.7
    sum_confidence: float = 0.6

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "ExtractionConfig":
        """Load a config from JSON; missing keys keep their defaults."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)

    def with_overrides(self, **overrides) -> "ExtractionConfig":
        """Copy with some fields replaced; overrides are validated like JSON input."""
        return self.model_validate({**self.model_dump(), **overrides})


DEFAULT_CONFIG = ExtractionConfig()
