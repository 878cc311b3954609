"""
Response Models
===============

JSON envelopes returned by every non-binary route.

Output Contract:
    success:        {"status": "success"}
    with message:   {"status": "success", "message": "Paste request sent"}
    failure:        {"error": "No frame available"}
    /frame/ocr:     {"texts": [{"text": "OK", "x": 10, "y": 20,
                                "width": 40, "height": 16}, ...]}

Design Rules:
    - `message` is omitted, not null, when absent
    - Every error response uses the same single-key shape
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """Success envelope for control routes."""

    status: str = Field(default="success", description="Always 'success'")
    message: Optional[str] = Field(
        default=None,
        description="Optional human-readable detail",
    )

    def body(self) -> dict:
        return self.model_dump(exclude_none=True)


class ErrorResponse(BaseModel):
    """Failure envelope for every route."""

    error: str = Field(..., description="Human-readable error message")


class TextRegionModel(BaseModel):
    """
    One recognized text block.

    Attributes:
        text: Block text
        x: Left edge in frame pixels
        y: Top edge in frame pixels
        width: Box width in pixels
        height: Box height in pixels
    """

    text: str
    x: int
    y: int
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class OcrResponse(BaseModel):
    """Payload of /frame/ocr."""

    texts: List[TextRegionModel] = Field(default_factory=list)
