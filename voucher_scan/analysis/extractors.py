# voucher_scan/analysis/extractors.py
"""
AmountExtractor strategies.

Every producer (deterministic engine, Gemini vision, Gemini on OCR text, or a
hybrid of both) returns the same ExtractionResult, so callers pick one with
build_extractor() and never branch on which one ran.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional, Union

from voucher_scan.analysis.errors import AnalyzerError
from voucher_scan.analysis.gemini_client import GeminiClient
from voucher_scan.config.settings import get_settings
from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig
from voucher_scan.extraction.currency import detect_currency
from voucher_scan.extraction.models import ExtractionMethod, ExtractionResult
from voucher_scan.extraction.number_parser import is_plausible, parse_amount
from voucher_scan.extraction.totals_extractor import TotalSelector, split_lines

logger = logging.getLogger(__name__)

VISION_PROMPT = """You are reading a photographed receipt or voucher (Arabic and/or English, sometimes German or Portuguese).

Find the FINAL total amount of the document, not an individual line item.
- Arabic total labels: "الإجمالي", "اجمالي", "المجموع", "الكلي". The word "ألف" after a number means thousands.
- In tables the total usually sits in the last row of the rightmost column.
- Ignore tax registration numbers, phone numbers and dates.

Answer with one JSON object only:
{"amount": number or null, "currency": "ISO code such as EGP, EUR, USD", "confidence": number between 0 and 1, "vendor": "string or null", "date": "string or null", "aiReasoning": "how the total was found"}"""

OCR_SYSTEM_PROMPT = """You extract the grand total from noisy OCR text of Arabic and English receipts.

Rules:
1. Arabic total keywords: الإجمالي، اجمالي، المجموع، مجموع، الكلي. English: total, sum, grand total.
2. "number + ألف" means the number is in thousands.
3. In table rows the total is usually the rightmost number of the last row.
4. Ignore line items, registration numbers, phone numbers and dates.
5. If no explicit total exists, the total is the sum of the line item totals.

Answer with one JSON object only:
{"amount": number or null, "currency": "string", "confidence": number between 0 and 1, "aiReasoning": "explanation"}"""

VISION_MIN_CONFIDENCE = 0.5
VISION_BOOST = 1.2
OCR_MIN_CONFIDENCE = 0.3


class AmountExtractor(ABC):
    """Capability interface: OCR text (and optionally image bytes) -> ExtractionResult."""

    method: ExtractionMethod = ExtractionMethod.TRADITIONAL

    @abstractmethod
    def extract(self, ocr_text: str, image: Optional[bytes] = None) -> ExtractionResult:
        ...


class DeterministicExtractor(AmountExtractor):
    method = ExtractionMethod.TRADITIONAL

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.selector = TotalSelector(config)

    def extract(self, ocr_text: str, image: Optional[bytes] = None) -> ExtractionResult:
        return self.selector.select(ocr_text)


class _GeminiExtractor(AmountExtractor):
    def __init__(self, client: GeminiClient, config: Optional[ExtractionConfig] = None):
        self.client = client
        self.config = config or DEFAULT_CONFIG

    def extract(self, ocr_text: str, image: Optional[bytes] = None) -> ExtractionResult:
        ocr_text = ocr_text or ""
        try:
            payload = self._analyze(ocr_text, image)
        except AnalyzerError as e:
            logger.warning("%s analysis failed: %s", self.method.value, e)
            return self._failed(ocr_text, str(e))
        return self._to_result(payload, ocr_text)

    @abstractmethod
    def _analyze(self, ocr_text: str, image: Optional[bytes]) -> dict:
        ...

    def _failed(self, ocr_text: str, reason: str) -> ExtractionResult:
        return ExtractionResult.not_found(
            currency=detect_currency(ocr_text, self.config),
            raw_text=ocr_text,
            source_lines=tuple(split_lines(ocr_text)),
            method=ExtractionMethod.FAILED,
            reasoning=f"{self.method.value} analysis failed: {reason}",
        )

    def _to_result(self, payload: dict, ocr_text: str) -> ExtractionResult:
        """Coerce a model answer into the engine's invariants."""
        amount = _as_amount(payload.get("amount"), self.config)
        if not is_plausible(amount, self.config):
            amount = None

        confidence = _as_float(payload.get("confidence")) or 0.0
        confidence = max(0.0, min(confidence, 1.0)) if amount is not None else 0.0

        currency = str(payload.get("currency") or "").strip().upper()
        if not currency:
            currency = detect_currency(ocr_text, self.config)

        return ExtractionResult(
            amount=amount,
            currency=currency,
            confidence=confidence,
            raw_text=ocr_text,
            source_lines=tuple(split_lines(ocr_text)),
            stage="ai" if amount is not None else "not_found",
            method=self.method,
            reasoning=payload.get("aiReasoning") or payload.get("reasoning"),
        )


class GeminiVisionExtractor(_GeminiExtractor):
    method = ExtractionMethod.AI_VISION

    def _analyze(self, ocr_text: str, image: Optional[bytes]) -> dict:
        if not image:
            raise AnalyzerError("no image supplied")
        parts = [VISION_PROMPT, {"mime_type": guess_mime_type(image), "data": image}]
        return self.client.generate_json(parts)


class GeminiOcrExtractor(_GeminiExtractor):
    method = ExtractionMethod.AI_OCR

    def _analyze(self, ocr_text: str, image: Optional[bytes]) -> dict:
        if not ocr_text.strip():
            raise AnalyzerError("no OCR text supplied")
        parts = [f"Find the total amount in this receipt OCR text:\n\n{ocr_text}"]
        return self.client.generate_json(parts, system_prompt=OCR_SYSTEM_PROMPT)


class HybridExtractor(AmountExtractor):
    """
    Vision first, then AI-on-OCR; keep the most confident usable answer.
    Falls back to the deterministic engine when neither is usable.
    """

    method = ExtractionMethod.HYBRID

    def __init__(
        self,
        vision: AmountExtractor,
        ocr: AmountExtractor,
        fallback: Optional[AmountExtractor] = None,
    ):
        self.vision = vision
        self.ocr = ocr
        self.fallback = fallback or DeterministicExtractor()

    def extract(self, ocr_text: str, image: Optional[bytes] = None) -> ExtractionResult:
        results = []

        if image:
            v = self.vision.extract(ocr_text, image)
            if v.amount and v.confidence > VISION_MIN_CONFIDENCE:
                results.append(replace(v, confidence=min(1.0, v.confidence * VISION_BOOST)))

        if ocr_text and ocr_text.strip():
            o = self.ocr.extract(ocr_text, image)
            if o.amount and o.confidence > OCR_MIN_CONFIDENCE:
                results.append(o)

        if not results:
            logger.info("no usable AI answer; using deterministic engine")
            result = self.fallback.extract(ocr_text, image)
            return replace(result, reasoning=result.reasoning or "AI analysis unavailable; deterministic fallback")

        best = results[0]
        for r in results[1:]:
            if r.confidence > best.confidence:
                best = r
        logger.info("hybrid analysis -> %s %s (%.2f)", best.amount, best.currency, best.confidence)
        return replace(best, method=ExtractionMethod.HYBRID)


def _as_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_amount(value, config: ExtractionConfig) -> Optional[float]:
    """Numbers pass through; text such as "44,800 EGP" goes through the tokenizer."""
    if isinstance(value, str):
        return parse_amount(value, config)
    return _as_float(value)


def guess_mime_type(image: bytes) -> str:
    if image.startswith(b"\x89PNG"):
        return "image/png"
    if image[:4] == b"RIFF" and image[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def build_extractor(
    method: Union[str, ExtractionMethod] = ExtractionMethod.TRADITIONAL,
    settings=None,
    config: Optional[ExtractionConfig] = None,
) -> AmountExtractor:
    """
    The one place a producer is chosen.

    Raises:
        ValueError: unknown or non-selectable method.
        AnalyzerError: an AI method was requested without an API key.
    """
    method = ExtractionMethod(method)
    if settings is None:
        settings = get_settings()
    if config is None:
        config = settings.extraction_config()

    if method == ExtractionMethod.TRADITIONAL:
        return DeterministicExtractor(config)
    if method == ExtractionMethod.FAILED:
        raise ValueError("'failed' is a result tag, not an extraction method")

    client = GeminiClient.from_settings(settings)
    if method == ExtractionMethod.AI_VISION:
        return GeminiVisionExtractor(client, config)
    if method == ExtractionMethod.AI_OCR:
        return GeminiOcrExtractor(client, config)
    return HybridExtractor(
        GeminiVisionExtractor(client, config),
        GeminiOcrExtractor(client, config),
        DeterministicExtractor(config),
    )
