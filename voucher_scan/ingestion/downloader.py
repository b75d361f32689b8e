# voucher_scan/ingestion/downloader.py
import os
import uuid

import requests

ALLOWED_EXTENSIONS = ["png", "jpg", "jpeg", "tiff", "webp"]


class DocumentDownloadError(Exception):
    pass


def download_document(url: str, base_dir=None, timeout: float = 15):
    """Download a voucher image to base_dir. Returns (doc_id, path)."""
    if base_dir is None:
        base_dir = os.path.join(os.getcwd(), "tmp", "vouchers")

    ext = url.split("?")[0].split(".")[-1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise DocumentDownloadError(f"Unsupported file type: {ext}")

    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise DocumentDownloadError(f"Could not download file: {e}") from e
    if resp.status_code != 200:
        raise DocumentDownloadError(f"Could not download file. Status={resp.status_code}")

    os.makedirs(base_dir, exist_ok=True)
    doc_id = str(uuid.uuid4())
    doc_path = os.path.join(base_dir, f"{doc_id}.{ext}")
    with open(doc_path, "wb") as f:
        f.write(resp.content)

    return doc_id, doc_path
