"""
Data Models
===========

Pydantic models for the gateway's HTTP responses.

Models:
    - StatusResponse: {"status": "success"[, "message": ...]}
    - ErrorResponse: {"error": ...}
    - TextRegionModel / OcrResponse: /frame/ocr payload
"""

from mirror_gateway.models.responses import (
    ErrorResponse,
    OcrResponse,
    StatusResponse,
    TextRegionModel,
)

__all__ = [
    "StatusResponse",
    "ErrorResponse",
    "TextRegionModel",
    "OcrResponse",
]
