# voucher_scan/ocr/ocr_text.py
"""
OCR provider boundary: image -> plain UTF-8 text with line breaks preserved.
The extraction engine only ever sees the returned string.
"""
import logging
import os
from typing import Union

import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = "eng+ara+deu+por"
DEFAULT_TIMEOUT = 30


class OcrError(Exception):
    """Tesseract failed or the image could not be read."""


class OcrTimeoutError(OcrError):
    """Recognition did not finish within the time limit."""


def ocr_image(
    image: Union[str, Image.Image],
    languages: str = DEFAULT_LANGUAGES,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Run Tesseract on a path or PIL image and return the recognized text."""
    if isinstance(image, str):
        if not os.path.isfile(image):
            raise OcrError(f"image not found: {image}")
        try:
            img = Image.open(image).convert("RGB")
        except OSError as e:
            raise OcrError(f"could not read image {image}: {e}") from e
    else:
        img = image

    try:
        text = pytesseract.image_to_string(img, lang=languages, timeout=timeout)
    except RuntimeError as e:
        # pytesseract signals a killed process with RuntimeError("Tesseract process timeout")
        if "timeout" in str(e).lower():
            raise OcrTimeoutError(f"OCR timed out after {timeout}s") from e
        raise OcrError(str(e)) from e
    except pytesseract.TesseractError as e:
        raise OcrError(f"tesseract failed: {e}") from e

    logger.debug("OCR produced %d characters", len(text))
    return text
