# voucher_scan/api/server.py
import logging
import tempfile
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from voucher_scan.analysis.errors import AnalyzerError
from voucher_scan.analysis.extractors import build_extractor
from voucher_scan.config.settings import get_settings
from voucher_scan.extraction.models import ExtractionMethod
from voucher_scan.ingestion.downloader import DocumentDownloadError, download_document
from voucher_scan.ocr.ocr_text import OcrError, OcrTimeoutError
from voucher_scan.pipeline.run_full_extraction import process_voucher

logger = logging.getLogger(__name__)

app = FastAPI(title="Voucher Amount Extraction API", version="1.0")


class TextRequest(BaseModel):
    text: str
    method: ExtractionMethod = ExtractionMethod.TRADITIONAL


class DocumentRequest(BaseModel):
    document: str   # URL to image (PNG/JPG/TIFF/WEBP)
    method: ExtractionMethod = ExtractionMethod.TRADITIONAL


def _extractor(method):
    try:
        return build_extractor(method, get_settings())
    except (AnalyzerError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
def health():
    settings = get_settings()
    return {"status": "ok", "ai_available": settings.has_api_key}


@app.post("/extract-amount")
def extract_amount_from_text(data: TextRequest):
    """Run extraction on text that has already been through OCR."""
    extractor = _extractor(data.method)
    result = extractor.extract(data.text)
    return {"is_success": True, "data": result.to_dict(include_candidates=True)}


@app.post("/extract-voucher-data")
def extract_voucher(data: DocumentRequest):
    """
    FULL PIPELINE:
    1. Download voucher image from URL
    2. Preprocess
    3. OCR
    4. Amount extraction with the requested method
    """
    settings = get_settings()
    extractor = _extractor(data.method)

    with tempfile.TemporaryDirectory() as tmp_dir:
        try:
            _, path = download_document(data.document, base_dir=tmp_dir, timeout=settings.download_timeout)
        except DocumentDownloadError as e:
            raise HTTPException(status_code=400, detail=f"Download error: {e}")

        try:
            result = process_voucher(path, extractor, settings)
        except OcrTimeoutError as e:
            raise HTTPException(status_code=504, detail=str(e))
        except OcrError as e:
            raise HTTPException(status_code=400, detail=f"OCR error: {e}")
        except Exception as e:
            logger.exception("voucher pipeline failed for %s", Path(path).name)
            return {"is_success": False, "message": str(e)}

    return {"is_success": True, "data": result}


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    uvicorn.run("voucher_scan.api.server:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
