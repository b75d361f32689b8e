# voucher_scan/extraction/keyword_tables.py
"""
Default multilingual tables used by the amount extraction engine.

These are plain data. ExtractionConfig wraps them and can be overridden from a
JSON file, so adding a language never touches the selection logic.
"""

# Words/phrases that label a grand total
TOTAL_KEYWORDS = (
    # Arabic (with common alef/ya variants produced by OCR)
    "الإجمالي", "الاجمالي", "اجمالي", "إجمالي", "الإجمالى", "الاجمالى",
    "ﻹجمالي", "ﻻجمالي",
    "المجموع", "مجموع", "الكلي", "الكلى",
    "المبلغ الإجمالي", "المبلغ الكلي", "المبلغ",
    "الجملة", "جملة",
    # English
    "total", "total due", "grand total", "amount due", "balance due",
    "sum", "subtotal", "sub total", "net total", "final total", "net payable",
    "amount payable",
    # German
    "gesamt", "summe", "endsumme", "gesamtsumme", "gesamtbetrag",
    # Portuguese
    "soma", "montante", "valor total", "saldo",
    # French
    "montant", "somme", "total général",
)

# Column titles. A row made of these is a table header, not a data row.
# Multi-word entries are decisive on their own; single words need company.
HEADER_KEYWORDS = (
    # Arabic
    "نوع الصنف", "سعر الوحدة", "الصنف", "الحجم", "العدد", "الكمية", "السعر",
    "البيان", "الوحدة",
    # English
    "total price", "unit price", "line total", "qty", "quantity", "description",
    "item", "price", "unit", "rate",
    # German / Portuguese / French
    "einzelpreis", "menge", "artikel", "preço unitário", "quantidade",
    "prix unitaire", "quantité",
)

# Tax, registration and contact noise
IGNORE_KEYWORDS = (
    "vat", "tax", "مضافة", "ضريبة", "steuer", "mwst", "imposto", "iva",
    "service", "خدمة", "bedienung",
    "registration", "رقم التسجيل", "التسجيل", "تسجيل", "ضريبي",
    "id:", "رقم:", "number:", "no:", "invoice no", "رقم الفاتورة",
    "phone", "tel", "mobile", "fax", "email", "هاتف", "تليفون", "موبايل", "بريد",
    "تاريخ", "date", "datum", "data",
    "cash", "change", "tendered", "card", "نقدا", "الباقي",
    "receipt no", "transaction", "terminal", "auth", "ref",
)

# A standalone word after a number meaning "x1000"
THOUSANDS_WORDS = ("ألف", "الف", "آلاف", "الاف", "thousand", "tausend", "mil")

# Removed before tokenizing so they cannot glue digit groups together
UNIT_WORDS = (
    "ألف", "الف", "آلاف", "الاف", "مليون", "thousand", "million", "tausend",
    "جنيه", "جنيها", "دولار", "يورو", "ريال", "درهم", "ج.م",
    "egp", "cve", "usd", "eur", "gbp", "sar", "aed",
    "euro", "euros", "dollar", "dollars", "escudo", "escudos",
)

CURRENCY_SYMBOLS = "€$£¥₹﷼"

# Ordered: the first match wins. Codes whose symbols contain another code's
# symbol must come first (E£ before £, US$ and CVE before $).
CURRENCY_PATTERNS = (
    (r"E£|\bEGP\b|egyptian\s+pounds?|جنيه|ج\.م|L\.E\b", "EGP"),
    (r"\bCVE\b|\bescudos?\b", "CVE"),
    (r"€|\bEUR\b|\beuros?\b|يورو", "EUR"),
    (r"US\$|\bUSD\b|\bdollars?\b|دولار", "USD"),
    (r"£|\bGBP\b|\bpounds?\b", "GBP"),
    (r"﷼|\bSAR\b|ريال", "SAR"),
    (r"\bAED\b|درهم", "AED"),
    (r"\$", "USD"),
)
