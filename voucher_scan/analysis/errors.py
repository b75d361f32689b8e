# voucher_scan/analysis/errors.py


class AnalyzerError(Exception):
    """The AI analyzer could not produce a usable answer (HTTP, quota, bad JSON, no key)."""
