# voucher_scan/extraction/digits.py
"""
Digit and script helpers for OCR text.
"""

# Arabic-Indic ٠-٩ (U+0660..) and Extended Arabic / Persian ۰-۹ (U+06F0..)
_DIGIT_TABLE = {}
for _i in range(10):
    _DIGIT_TABLE[0x0660 + _i] = str(_i)
    _DIGIT_TABLE[0x06F0 + _i] = str(_i)

ARABIC_RANGE = range(0x0600, 0x06FF + 1)
ARABIC_PRESENTATION_FORMS_A = range(0xFB50, 0xFDFF + 1)
ARABIC_PRESENTATION_FORMS_B = range(0xFE70, 0xFEFF + 1)


def normalize_digits(text: str) -> str:
    """Convert Arabic/Persian digits to Western digits; everything else is untouched."""
    if not text:
        return ""
    return text.translate(_DIGIT_TABLE)


def _is_arabic_char(c: str) -> bool:
    cp = ord(c)
    return (
        cp in ARABIC_RANGE
        or cp in ARABIC_PRESENTATION_FORMS_A
        or cp in ARABIC_PRESENTATION_FORMS_B
    )


def contains_arabic(text: str) -> bool:
    if not text:
        return False
    return any(_is_arabic_char(c) for c in text)
