# voucher_scan/extraction/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ExtractionMethod(str, Enum):
    """Which producer made an ExtractionResult."""

    TRADITIONAL = "traditional"
    AI_VISION = "ai-vision"
    AI_OCR = "ai-ocr"
    HYBRID = "hybrid"
    FAILED = "failed"


@dataclass(frozen=True)
class Line:
    """One non-blank line of the OCR transcript and its position in the document."""

    index: int
    text: str


@dataclass(frozen=True)
class NumberToken:
    """A positive number parsed from a line."""

    value: float
    text: str
    line_index: int = 0


@dataclass(frozen=True)
class Candidate:
    """A scored (line, amount) pair competing to become the total."""

    amount: float
    currency: str
    confidence: float
    source_line_index: int
    source_line: str
    has_total_context: bool


@dataclass(frozen=True)
class ExtractionResult:
    amount: Optional[float]
    currency: str
    confidence: float
    raw_text: str
    source_lines: Tuple[Line, ...] = ()
    stage: str = "not_found"
    candidates: Tuple[Candidate, ...] = field(default=(), compare=False)
    method: ExtractionMethod = ExtractionMethod.TRADITIONAL
    reasoning: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.amount is not None

    @classmethod
    def not_found(
        cls,
        currency: str,
        raw_text: str = "",
        source_lines: Tuple[Line, ...] = (),
        candidates: Tuple[Candidate, ...] = (),
        method: ExtractionMethod = ExtractionMethod.TRADITIONAL,
        reasoning: Optional[str] = None,
    ) -> "ExtractionResult":
        return cls(
            amount=None,
            currency=currency,
            confidence=0.0,
            raw_text=raw_text,
            source_lines=source_lines,
            stage="not_found",
            candidates=candidates,
            method=method,
            reasoning=reasoning,
        )

    def to_dict(self, include_candidates: bool = False) -> dict:
        out = {
            "amount": self.amount,
            "currency": self.currency,
            "confidence": round(self.confidence, 4),
            "raw_text": self.raw_text,
            "detected_rows": [ln.text for ln in self.source_lines],
            "stage": self.stage,
            "method": self.method.value,
            "reasoning": self.reasoning,
        }
        if include_candidates:
            out["candidates"] = [
                {
                    "amount": c.amount,
                    "currency": c.currency,
                    "confidence": round(c.confidence, 4),
                    "line_index": c.source_line_index,
                    "line": c.source_line,
                    "has_total_context": c.has_total_context,
                }
                for c in self.candidates
            ]
        return out
