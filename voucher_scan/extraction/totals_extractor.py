# voucher_scan/extraction/totals_extractor.py
"""
Deterministic total selection over an OCR transcript.

Stages, each one short-circuits on success:
  1. header_lookahead  - a true total row, then the largest plausible number on
                         it or in the next 12 rows. Rows with an ignore keyword
                         (cash, change, dates) are left out of that window
                         unless lookahead_skip_ignored is turned off.
  2. line_scan         - one scored candidate per row, keep the best
  3. max_as_total /    - Arabic receipts with no total row: decide between the
     sum_of_items        largest amount and the sum of the items
  4. tail_fallback     - first plausible number in the last 5 rows
  5. not_found
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from voucher_scan.extraction.config import DEFAULT_CONFIG, ExtractionConfig
from voucher_scan.extraction.currency import detect_currency
from voucher_scan.extraction.models import Candidate, ExtractionResult, Line, NumberToken
from voucher_scan.extraction.number_parser import (
    has_thousands_indicator,
    is_plausible,
    parse_numbers,
    pick_line_amount,
)
from voucher_scan.extraction.reconcile import reconcile
from voucher_scan.extraction.row_classifier import (
    flag_nearby,
    has_ignore_keyword,
    has_total_keyword,
    is_table_header,
)
from voucher_scan.extraction.scoring import calculate_confidence, context_quality

logger = logging.getLogger(__name__)

_CONFIDENCE_EPS = 1e-6
_CONFIDENCE_TIE = 0.01


def split_lines(text: str) -> List[Line]:
    """Non-blank lines, in document order, with their index."""
    if not text:
        return []
    rows = [ln for ln in text.splitlines() if ln.strip()]
    return [Line(index=i, text=ln) for i, ln in enumerate(rows)]


@dataclass(frozen=True)
class _LineInfo:
    """Everything the stages need to know about one line, computed once."""

    total: bool
    header: bool
    ignore: bool
    thousands: bool
    tokens: Tuple[NumberToken, ...]

    @property
    def true_total(self) -> bool:
        return self.total and not self.header


def outranks(new: Candidate, best: Optional[Candidate]) -> bool:
    """
    (a) total/thousands context beats no context
    (b) then higher confidence
    (c) confidences within 0.01: larger amount, then later line
    """
    if best is None:
        return True
    if new.has_total_context != best.has_total_context:
        return new.has_total_context
    if new.confidence > best.confidence + _CONFIDENCE_EPS:
        return True
    if abs(new.confidence - best.confidence) <= _CONFIDENCE_TIE:
        if new.amount > best.amount:
            return True
        if new.amount == best.amount and new.source_line_index > best.source_line_index:
            return True
    return False


class TotalSelector:
    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def select(self, text: str) -> ExtractionResult:
        """Never raises: any unexpected failure degrades to "not found"."""
        try:
            return self._select(text or "")
        except Exception:
            logger.exception("amount extraction failed; returning not found")
            raw_text = text if isinstance(text, str) else ""
            return ExtractionResult.not_found(currency=self._fallback_currency(raw_text), raw_text=raw_text)

    def _fallback_currency(self, text: str) -> str:
        try:
            return detect_currency(text, self.config)
        except Exception:
            logger.exception("currency detection failed; using %s", self.config.default_currency)
            return self.config.default_currency

    # ---------------------------
    # Pipeline
    # ---------------------------
    def _select(self, text: str) -> ExtractionResult:
        cfg = self.config
        doc_currency = detect_currency(text, cfg)
        lines = split_lines(text)
        if not lines:
            return ExtractionResult.not_found(currency=doc_currency, raw_text=text)

        info = [self._describe(ln) for ln in lines]
        source_lines = tuple(lines)

        result = self._header_lookahead(lines, info, doc_currency)
        if result is not None:
            return result

        best, candidates = self._scan_lines(lines, info, doc_currency)
        logger.debug(
            "line scan: %d candidates, best=%s",
            len(candidates),
            f"{best.amount} (line {best.source_line_index}, ctx={best.has_total_context})" if best else None,
        )

        if best is not None and best.has_total_context:
            return self._from_candidate(best, source_lines, candidates)

        if doc_currency in cfg.disambiguation_currencies:
            result = self._disambiguate(lines, info, doc_currency, candidates)
            if result is not None:
                return result

        if best is not None:
            return self._from_candidate(best, source_lines, candidates)

        result = self._tail_fallback(lines, info, doc_currency, candidates)
        if result is not None:
            return result

        logger.debug("no amount found in %d lines", len(lines))
        return ExtractionResult.not_found(
            currency=doc_currency,
            raw_text=text,
            source_lines=source_lines,
            candidates=tuple(candidates),
        )

    def _describe(self, line: Line) -> _LineInfo:
        cfg = self.config
        return _LineInfo(
            total=has_total_keyword(line.text, cfg),
            header=is_table_header(line.text, cfg),
            ignore=has_ignore_keyword(line.text, cfg),
            thousands=has_thousands_indicator(line.text, cfg),
            tokens=tuple(parse_numbers(line.text, line.index, cfg)),
        )

    def _is_excluded(self, info: _LineInfo, has_context: bool) -> bool:
        return info.ignore and not (has_context or info.thousands)

    # ---------------------------
    # Stage 1
    # ---------------------------
    def _header_lookahead(self, lines, info, doc_currency) -> Optional[ExtractionResult]:
        cfg = self.config
        triggers = [i for i, li in enumerate(info) if li.true_total]
        if not triggers:
            return None

        best: Optional[NumberToken] = None
        for idx in triggers:
            end = min(len(lines) - 1, idx + cfg.header_lookahead_lines)
            for j in range(idx, end + 1):
                if cfg.lookahead_skip_ignored and self._is_excluded(info[j], info[j].total):
                    continue
                for tok in info[j].tokens:
                    if not is_plausible(tok.value, cfg):
                        continue
                    if (
                        best is None
                        or tok.value > best.value
                        or (tok.value == best.value and j > best.line_index)
                    ):
                        best = tok

        if best is None:
            return None

        line = lines[best.line_index]
        currency = detect_currency(line.text, cfg, default=doc_currency)
        logger.debug("header lookahead -> %s (line %d)", best.value, best.line_index)
        candidate = Candidate(
            amount=best.value,
            currency=currency,
            confidence=cfg.header_confidence,
            source_line_index=best.line_index,
            source_line=line.text,
            has_total_context=True,
        )
        return ExtractionResult(
            amount=best.value,
            currency=currency,
            confidence=cfg.header_confidence,
            raw_text=line.text,
            source_lines=tuple(lines),
            stage="header_lookahead",
            candidates=(candidate,),
        )

    # ---------------------------
    # Stage 2
    # ---------------------------
    def _scan_lines(self, lines, info, doc_currency) -> Tuple[Optional[Candidate], List[Candidate]]:
        cfg = self.config
        weights = cfg.weights
        true_totals = [li.true_total for li in info]

        best: Optional[Candidate] = None
        candidates: List[Candidate] = []
        for line, li in zip(lines, info):
            i = line.index
            has_context = flag_nearby(true_totals, i, cfg.nearby_window)
            strong = has_context or li.thousands
            if self._is_excluded(li, has_context):
                logger.debug("line %d skipped (ignore keyword)", i)
                continue

            tok = pick_line_amount(list(li.tokens), cfg)
            if tok is None:
                continue

            quality = context_quality(li.thousands, has_context, li.header, weights)
            confidence = calculate_confidence(
                strong,
                i >= len(lines) - cfg.tail_lines,
                tok.value,
                quality,
                weights,
            )
            candidate = Candidate(
                amount=tok.value,
                currency=detect_currency(line.text, cfg, default=doc_currency),
                confidence=confidence,
                source_line_index=i,
                source_line=line.text,
                has_total_context=strong,
            )
            candidates.append(candidate)
            if outranks(candidate, best):
                best = candidate
        return best, candidates

    def _from_candidate(self, best: Candidate, source_lines, candidates) -> ExtractionResult:
        return ExtractionResult(
            amount=best.amount,
            currency=best.currency,
            confidence=best.confidence,
            raw_text=best.source_line,
            source_lines=source_lines,
            stage="line_scan",
            candidates=tuple(candidates),
        )

    # ---------------------------
    # Stage 3
    # ---------------------------
    def _disambiguate(self, lines, info, doc_currency, candidates) -> Optional[ExtractionResult]:
        cfg = self.config
        true_totals = [li.true_total for li in info]
        tokens: List[NumberToken] = []
        for line, li in zip(lines, info):
            if self._is_excluded(li, flag_nearby(true_totals, line.index, cfg.nearby_window)):
                continue
            tokens.extend(t for t in li.tokens if is_plausible(t.value, cfg))

        decision = reconcile([t.value for t in tokens], cfg)
        if decision is None:
            return None

        logger.debug(
            "%s -> %s (largest=%s, computed_total=%s)",
            decision["choice"], decision["amount"], decision["largest"], decision["computed_total"],
        )
        if decision["choice"] == "max_as_total":
            source = next(t for t in reversed(tokens) if t.value == decision["largest"])
            raw_text = lines[source.line_index].text
        else:
            in_range = {
                t.line_index for t in tokens
                if cfg.disambiguation_min_amount <= t.value <= cfg.disambiguation_max_amount
            }
            raw_text = "\n".join(lines[i].text for i in sorted(in_range))

        return ExtractionResult(
            amount=decision["amount"],
            currency=doc_currency,
            confidence=decision["confidence"],
            raw_text=raw_text,
            source_lines=tuple(lines),
            stage=decision["choice"],
            candidates=tuple(candidates),
        )

    # ---------------------------
    # Stage 4
    # ---------------------------
    def _tail_fallback(self, lines, info, doc_currency, candidates) -> Optional[ExtractionResult]:
        cfg = self.config
        for line in reversed(lines[-cfg.tail_lines:]):
            tok = next((t for t in info[line.index].tokens if is_plausible(t.value, cfg)), None)
            if tok is None:
                continue
            logger.debug("tail fallback -> %s (line %d)", tok.value, line.index)
            return ExtractionResult(
                amount=tok.value,
                currency=detect_currency(line.text, cfg, default=doc_currency),
                confidence=cfg.tail_confidence,
                raw_text=line.text,
                source_lines=tuple(lines),
                stage="tail_fallback",
                candidates=tuple(candidates),
            )
        return None


def extract_amount(text: str, config: Optional[ExtractionConfig] = None) -> ExtractionResult:
    """Best-guess total, currency and confidence for one OCR transcript."""
    return TotalSelector(config).select(text)
