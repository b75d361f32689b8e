# voucher_scan/preprocessing/image_cleaner.py
import logging
import os

import cv2
import numpy as np

logger = logging.getLogger(__name__)

MAX_DIMENSION = 2048
GAMMA = 1.2
CONTRAST = 1.3


def limit_size(img, max_dimension=MAX_DIMENSION):
    """Scale down so the longest side is at most max_dimension."""
    h, w = img.shape[:2]
    longest = max(h, w)
    if longest <= max_dimension:
        return img
    scale = max_dimension / longest
    return cv2.resize(img, None, fx=scale, fy=scale, interpolation=cv2.INTER_AREA)


def enhance_gray(gray, gamma=GAMMA, contrast=CONTRAST):
    """Gamma lift then contrast stretch around mid-grey, via a lookup table."""
    levels = np.arange(256, dtype=np.float32)
    lut = np.power(levels / 255.0, 1.0 / gamma) * 255.0
    lut = (lut - 128.0) * contrast + 128.0
    lut = np.clip(lut, 0, 255).astype(np.uint8)
    return cv2.LUT(gray, lut)


def preprocess_for_ocr(image_path, out_dir=None):
    """
    Grayscale, size-limit and contrast-enhance a voucher photo for OCR.
    Returns the path of the cleaned PNG, or None if the image cannot be read.
    """
    img = cv2.imread(image_path)
    if img is None:
        logger.warning("Could not read image: %s", image_path)
        return None

    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    gray = limit_size(gray)
    cleaned = enhance_gray(gray)

    if out_dir is None:
        out_dir = os.path.join(os.path.dirname(image_path), "preprocessed")
    os.makedirs(out_dir, exist_ok=True)

    base = os.path.splitext(os.path.basename(image_path))[0]
    out_path = os.path.join(out_dir, f"{base}_clean.png")
    cv2.imwrite(out_path, cleaned)
    return out_path
