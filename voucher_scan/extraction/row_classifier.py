# voucher_scan/extraction/row_classifier.py
"""
Per-line keyword classification: total rows, column-header rows and noise rows
(tax, registration, contact details).
"""
import re
from enum import Enum
from typing import List, Sequence

from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig
from voucher_scan.extraction.digits import normalize_digits
from voucher_scan.extraction.number_parser import word_pattern


class LineKind(str, Enum):
    HEADER = "header"
    TOTAL = "total"
    IGNORE = "ignore"
    PLAIN = "plain"


def _clean_text(s):
    if not s:
        return ""
    return re.sub(r"\s+", " ", normalize_digits(s)).strip().lower()


def _keyword_hits(text: str, keywords: Sequence[str]) -> List[str]:
    """
    ASCII keywords must stand alone ("tel" does not hit "hotel");
    Arabic keywords match as substrings since prefixes attach to words.
    """
    t = _clean_text(text)
    if not t:
        return []
    hits = []
    for k in keywords:
        kl = k.lower()
        if kl.isascii():
            pattern = word_pattern((kl,))
            if pattern and pattern.search(t):
                hits.append(k)
        elif kl in t:
            hits.append(k)
    return hits


def has_total_keyword(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    return bool(_keyword_hits(text, config.total_keywords))


def has_ignore_keyword(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    return bool(_keyword_hits(text, config.ignore_keywords))


def is_table_header(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    """A multi-word column title is enough; single words need company."""
    hits = _keyword_hits(text, config.header_keywords)
    if any(" " in h.strip() for h in hits):
        return True
    return len(set(hits)) >= config.header_min_matches


def is_true_total(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    """Total keyword on a data row; a header like "Total Price" does not count."""
    return has_total_keyword(text, config) and not is_table_header(text, config)


def has_total_context_nearby(
    index: int,
    lines: Sequence[str],
    window: int = 2,
    config: ExtractionConfig = DEFAULT_CONFIG,
) -> bool:
    """True if the line itself or any line within +/- window is a true total row."""
    return flag_nearby([is_true_total(ln, config) for ln in lines], index, window)


def flag_nearby(flags: Sequence[bool], index: int, window: int = 2) -> bool:
    """Same as has_total_context_nearby, over precomputed per-line flags."""
    if not flags or index < 0 or index >= len(flags):
        return False
    start = max(0, index - window)
    end = min(len(flags) - 1, index + window)
    return any(flags[i] for i in range(start, end + 1))


def classify_line(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> LineKind:
    if is_table_header(text, config):
        return LineKind.HEADER
    if has_total_keyword(text, config):
        return LineKind.TOTAL
    if has_ignore_keyword(text, config):
        return LineKind.IGNORE
    return LineKind.PLAIN

