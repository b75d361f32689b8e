# voucher_scan/analysis/gemini_client.py
"""
Gemini API client for voucher analysis.

Handles:
- generate_content calls with a per-request timeout
- retry with exponential backoff on quota / server errors
- pulling a JSON object out of the model's text answer
"""

import json
import logging
import re
import time
from typing import Dict, List, Optional, Union

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from voucher_scan.analysis.errors import AnalyzerError

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    google_exceptions.ResourceExhausted,
    google_exceptions.ServiceUnavailable,
    google_exceptions.InternalServerError,
    google_exceptions.DeadlineExceeded,
)
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

Part = Union[str, Dict]


def parse_json_response(text: str) -> Dict:
    """Parse the JSON object in a model answer, tolerating ```json fences and chatter."""
    if not text or not text.strip():
        raise AnalyzerError("empty response from model")
    cleaned = _FENCE_RE.sub("", text.strip())
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start < 0 or end <= start:
        raise AnalyzerError(f"no JSON object in model response: {text[:120]!r}")
    try:
        data = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise AnalyzerError(f"invalid JSON from model: {e}") from e
    if not isinstance(data, dict):
        raise AnalyzerError("model response is not a JSON object")
    return data


class GeminiClient:
    """Client for the Gemini generate_content API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash-lite",
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff: float = 1.0,
        max_tokens: int = 1000,
    ):
        if not api_key:
            raise AnalyzerError(
                "Gemini API key not set. "
                "Set VOUCHER_SCAN_GEMINI_API_KEY to use the AI methods."
            )

        genai.configure(api_key=api_key)
        self.model_name = model
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.backoff = backoff
        self.generation_config = {
            "temperature": 0.1,
            "max_output_tokens": max_tokens,
            "response_mime_type": "application/json",
        }
        self._models = {}
        self.request_count = 0

    @classmethod
    def from_settings(cls, settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.ai_timeout,
            max_retries=settings.ai_max_retries,
            backoff=settings.ai_backoff,
            max_tokens=settings.ai_max_tokens,
        )

    def _model(self, system_prompt: Optional[str]):
        if system_prompt not in self._models:
            self._models[system_prompt] = genai.GenerativeModel(
                self.model_name,
                system_instruction=system_prompt,
                generation_config=self.generation_config,
            )
        return self._models[system_prompt]

    def generate_json(self, parts: List[Part], system_prompt: Optional[str] = None) -> Dict:
        """
        Send one user turn made of `parts` and return the parsed JSON answer.

        Args:
            parts: prompt strings and {"mime_type": ..., "data": bytes} image blobs
            system_prompt: optional system instruction

        Raises:
            AnalyzerError: on API failure after retries, or an unusable answer.
        """
        model = self._model(system_prompt)
        response = self._generate(model, parts)
        try:
            text = response.text
        except ValueError as e:
            # raised when the candidate was blocked or carries no text part
            raise AnalyzerError(f"no text in Gemini response: {e}") from e
        return parse_json_response(text)

    def _generate(self, model, parts: List[Part]):
        last_error: Optional[AnalyzerError] = None
        for attempt in range(self.max_retries + 1):
            try:
                response = model.generate_content(parts, request_options={"timeout": self.timeout})
                self.request_count += 1
                return response
            except RETRYABLE_ERRORS as e:
                last_error = AnalyzerError(f"Gemini call failed ({type(e).__name__}): {e}")
            except google_exceptions.GoogleAPIError as e:
                raise AnalyzerError(f"Gemini call failed: {e}") from e

            if attempt < self.max_retries:
                delay = self.backoff * (2 ** attempt)
                logger.warning("%s; retrying in %.1fs (%d/%d)", last_error, delay, attempt + 1, self.max_retries)
                time.sleep(delay)

        raise last_error

    def get_usage_stats(self) -> Dict:
        return {"total_requests": self.request_count}
