# voucher_scan/extraction/number_parser.py
import logging
import re
from functools import lru_cache
from typing import List, Optional, Tuple

from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig
from voucher_scan.extraction.digits import normalize_digits
from voucher_scan.extraction.models import NumberToken

logger = logging.getLogger(__name__)

# pipe, 3+ spaces, or " - " mark distinct table columns
COLUMN_SPLIT_RE = re.compile(r"\||\s{3,}|\s-\s")
# everything that is not a digit, whitespace or a structural hint
NOISE_RE = re.compile(r"[^\d\s.,|\-]")
DIGIT_RE = re.compile(r"\d")
DIGIT_RUN_RE = re.compile(r"\d+(?:[.,]\d+)*")
# "50 300" -> 50300 (space used as thousands separator)
SPACED_THOUSANDS_RE = re.compile(r"(\d{1,3}) (\d{3}(?:[.,]\d{1,2})?)")

_MERGE_PREFIX_LEN = 3


# ---------------------------
# Word tables -> regex
# ---------------------------
@lru_cache(maxsize=512)
def word_pattern(words: Tuple[str, ...]) -> Optional[re.Pattern]:
    """
    Compile a table of words into one alternation.
    A word must not touch another letter, but may touch digits ("44800ألف").
    """
    if not words:
        return None
    alts = sorted({re.escape(w) for w in words if w}, key=len, reverse=True)
    if not alts:
        return None
    return re.compile(
        r"(?<![^\W\d_])(?:" + "|".join(alts) + r")(?![^\W\d_])",
        re.IGNORECASE,
    )


@lru_cache(maxsize=16)
def _symbol_pattern(symbols: str) -> Optional[re.Pattern]:
    if not symbols:
        return None
    return re.compile("[" + re.escape(symbols) + "]")


def has_thousands_indicator(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    if not text:
        return False
    pattern = word_pattern(tuple(config.thousands_words))
    return bool(pattern and pattern.search(normalize_digits(text)))


def strip_units(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> str:
    """Replace unit/currency words and currency symbols with a space."""
    words = word_pattern(tuple(config.unit_words))
    if words:
        text = words.sub(" ", text)
    symbols = _symbol_pattern(config.currency_symbols)
    if symbols:
        text = symbols.sub(" ", text)
    return text


# ---------------------------
# Numeric parsing
# ---------------------------
def to_float(raw: str) -> Optional[float]:
    """
    Parse one digit run with optional separators.
    Both ',' and '.' present -> the rightmost is the decimal mark.
    One kind, repeated or followed by exactly 3 digits -> thousands separator.
    Otherwise the separator is a decimal mark.
    """
    if not raw:
        return None
    s = raw
    has_dot = "." in s
    has_comma = "," in s
    if has_dot and has_comma:
        dec = max(s.rfind("."), s.rfind(","))
        s = s[:dec].replace(".", "").replace(",", "") + "." + s[dec + 1:]
    elif has_dot or has_comma:
        parts = s.split("." if has_dot else ",")
        if len(parts) > 2 or (len(parts[1]) == 3 and parts[0] != "0"):
            s = "".join(parts)
        else:
            s = parts[0] + "." + parts[1]
    try:
        return float(s)
    except ValueError:
        return None


def split_fused_token(token: NumberToken, config: ExtractionConfig = DEFAULT_CONFIG) -> List[NumberToken]:
    """
    Undo OCR fusing a unit price with a line total ("3804800" -> 380, 4800).
    Only pure digit runs are considered; the fused original is dropped.
    """
    digits = token.text
    if not digits.isdigit():
        return [token]
    if not config.merge_min_digits <= len(digits) <= config.merge_max_digits:
        return [token]
    if token.value <= config.merge_min_value:
        return [token]

    prefix = int(digits[:_MERGE_PREFIX_LEN])
    suffix = int(digits[_MERGE_PREFIX_LEN:])
    if config.merge_prefix_min <= prefix <= config.merge_prefix_max and suffix >= config.merge_suffix_min:
        logger.debug("split fused token %s -> %s + %s", digits, prefix, suffix)
        return [
            NumberToken(float(prefix), digits[:_MERGE_PREFIX_LEN], token.line_index),
            NumberToken(float(suffix), digits[_MERGE_PREFIX_LEN:], token.line_index),
        ]
    return [token]


def split_columns(text: str) -> List[str]:
    """Structural segments of a cleaned line that contain at least one digit."""
    segments = [s.strip() for s in COLUMN_SPLIT_RE.split(text)]
    return [s for s in segments if DIGIT_RE.search(s)]


def parse_numbers(line: str, line_index: int = 0, config: ExtractionConfig = DEFAULT_CONFIG) -> List[NumberToken]:
    """
    Extract every positive number on one OCR line.

    Column separators are never crossed, so "40 550 |22000" gives
    [40, 550, 22000] and never 40550. A lone "50 300" is read as 50300.
    """
    if not line:
        return []

    text = normalize_digits(line)
    thousands = has_thousands_indicator(text, config)
    text = strip_units(text, config)
    text = NOISE_RE.sub(" ", text).strip()
    if not text:
        return []

    segments = split_columns(text)
    tokens: List[NumberToken] = []

    if len(segments) == 1:
        m = SPACED_THOUSANDS_RE.fullmatch(segments[0])
        if m:
            value = to_float(m.group(1) + m.group(2))
            if value:
                tokens.append(NumberToken(value, segments[0], line_index))

    if not tokens:
        for seg in segments:
            for m in DIGIT_RUN_RE.finditer(seg):
                value = to_float(m.group(0))
                if value is None or value <= 0:
                    continue
                tokens.extend(split_fused_token(NumberToken(value, m.group(0), line_index), config))

    if thousands:
        tokens = [
            NumberToken(t.value * config.thousands_multiplier, t.text, t.line_index)
            if t.value < 1000 else t
            for t in tokens
        ]
    return tokens


# ---------------------------
# Token selection helpers
# ---------------------------
def is_plausible(value: Optional[float], config: ExtractionConfig = DEFAULT_CONFIG) -> bool:
    return value is not None and 0 < value <= config.max_amount


def pick_line_amount(tokens: List[NumberToken], config: ExtractionConfig = DEFAULT_CONFIG) -> Optional[NumberToken]:
    """Rightmost plausible token >= 1000 (totals are right-aligned), else the first plausible one."""
    plausible = [t for t in tokens if is_plausible(t.value, config)]
    if not plausible:
        return None
    preferred = [t for t in plausible if t.value >= config.preferred_min_amount]
    if preferred:
        return preferred[-1]
    return plausible[0]


def parse_amount(text: str, config: ExtractionConfig = DEFAULT_CONFIG) -> Optional[float]:
    """Largest plausible number in text, or None."""
    values = [t.value for t in parse_numbers(text, config=config) if is_plausible(t.value, config)]
    return max(values) if values else None
