# voucher_scan/pipeline/run_full_extraction.py
import argparse
import json
import logging
import sys
from collections import OrderedDict
from pathlib import Path

from voucher_scan.analysis.extractors import build_extractor
from voucher_scan.config.settings import get_settings
from voucher_scan.extraction.currency import format_currency
from voucher_scan.extraction.models import ExtractionMethod
from voucher_scan.ocr.ocr_text import ocr_image
from voucher_scan.preprocessing.image_cleaner import preprocess_for_ocr

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".tiff", ".webp")


# ---------------------------------------------
# SINGLE VOUCHER
# ---------------------------------------------
def process_voucher(image_path, extractor=None, settings=None):
    """
    Preprocess -> OCR -> amount extraction for one voucher image.
    OCR errors propagate to the caller.
    """
    settings = settings or get_settings()
    extractor = extractor or build_extractor(ExtractionMethod.TRADITIONAL, settings)

    image_path = str(image_path)
    clean_path = preprocess_for_ocr(image_path) or image_path
    text = ocr_image(clean_path, languages=settings.ocr_languages, timeout=settings.ocr_timeout)

    image_bytes = Path(image_path).read_bytes()
    result = extractor.extract(text, image_bytes)
    logger.info("%s -> %s %s (%.2f, %s)", Path(image_path).name, result.amount,
                result.currency, result.confidence, result.stage)

    out = result.to_dict()
    out["file"] = Path(image_path).name
    return out


# ---------------------------------------------
# TOTALS ACROSS VOUCHERS
# ---------------------------------------------
def summarize_totals(vouchers):
    """
    Group voucher amounts by currency. Vouchers without a positive amount are
    left out. overall_total is only meaningful with a single currency.
    """
    by_currency = OrderedDict()
    for v in vouchers:
        amount = v.get("amount")
        if not isinstance(amount, (int, float)) or amount <= 0:
            continue
        currency = v.get("currency") or "EUR"
        group = by_currency.setdefault(currency, {"total": 0.0, "count": 0})
        group["total"] += amount
        group["count"] += 1

    for currency, group in by_currency.items():
        group["formatted"] = format_currency(group["total"], currency)

    single = len(by_currency) == 1
    overall = None
    if single:
        overall = next(iter(by_currency.values()))["total"]

    return {
        "by_currency": dict(by_currency),
        "single_currency": single,
        "overall_total": overall,
        "voucher_count": sum(g["count"] for g in by_currency.values()),
    }


# ---------------------------------------------
# FOLDER
# ---------------------------------------------
def process_folder(folder, extractor=None, settings=None):
    folder = Path(folder)
    images = sorted(p for p in folder.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
    if not images:
        raise ValueError(f"No voucher images found: {folder}")

    settings = settings or get_settings()
    extractor = extractor or build_extractor(ExtractionMethod.TRADITIONAL, settings)

    logger.info("Found %d vouchers in %s", len(images), folder)
    vouchers = [process_voucher(p, extractor, settings) for p in images]

    return {
        "vouchers": vouchers,
        "totals": summarize_totals(vouchers),
    }


# ---------------------------------------------
# CLI
# ---------------------------------------------
def main(argv=None):
    parser = argparse.ArgumentParser(prog="voucher-scan", description="Extract total amounts from voucher images.")
    parser.add_argument("folder", help="folder with voucher images")
    parser.add_argument(
        "--method",
        default=ExtractionMethod.TRADITIONAL.value,
        choices=[m.value for m in ExtractionMethod if m != ExtractionMethod.FAILED],
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    extractor = build_extractor(args.method, settings)
    result = process_folder(args.folder, extractor, settings)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
