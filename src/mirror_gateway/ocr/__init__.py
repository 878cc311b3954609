"""
OCR Module
==========

Optional text-region extraction over the current frame.

Components:
    - TextExtractor: Tesseract-backed extractor (pytesseract)
    - TextRegion: Recognized block with bounding box
    - group_blocks: image_to_data rows -> block regions

pytesseract is an optional dependency (`pip install mirror-gateway[ocr]`).
The extractor reports OcrFailed at request time when it is missing.
"""

import importlib.util

from mirror_gateway.ocr.extractor import TextExtractor, TextRegion, group_blocks

OCR_AVAILABLE = importlib.util.find_spec("pytesseract") is not None

__all__ = [
    "TextExtractor",
    "TextRegion",
    "group_blocks",
    "OCR_AVAILABLE",
]
