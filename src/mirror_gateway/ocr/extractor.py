"""
Text Extractor
==============

Optional text recognition over the current frame, backed by Tesseract.

The extractor:
    - Converts the frame to RGB (shared with the image encoder)
    - Runs pytesseract.image_to_data and groups words into blocks
    - Returns regions in the recognizer's block order (not sorted)

Design Rules:
    - Fail with OcrFailed, never crash the request loop
    - An empty result is a valid, empty list
    - The recognizer callable is injectable (tests, alternative engines)
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from mirror_gateway.errors import OcrFailed
from mirror_gateway.frames.convert import ConversionError, frame_to_rgb
from mirror_gateway.frames.frame import Frame


logger = logging.getLogger(__name__)

# Tesseract result hierarchy levels (image_to_data "level" column)
LEVEL_BLOCK = 2
LEVEL_WORD = 5

Recognizer = Callable[[np.ndarray], Dict[str, List[Any]]]


@dataclass(frozen=True, slots=True)
class TextRegion:
    """
    Recognized block of text with its bounding box (pixels).

    Attributes:
        text: Block text; words joined by spaces, lines by newlines
        x: Left edge
        y: Top edge
        width: Box width
        height: Box height
    """

    text: str
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


class _Block:
    """Accumulates the words of one recognizer block."""

    __slots__ = ("box", "lines")

    def __init__(self) -> None:
        self.box: Optional[Tuple[int, int, int, int]] = None
        self.lines: Dict[Tuple[int, int], List[str]] = {}

    def add_word(self, line_key: Tuple[int, int], word: str, box: Tuple[int, int, int, int]) -> None:
        self.lines.setdefault(line_key, []).append(word)
        if self.box is None:
            self.box = box
        else:
            self.box = _union(self.box, box)

    @property
    def text(self) -> str:
        return "\n".join(" ".join(words) for words in self.lines.values())


def _union(a: Tuple[int, int, int, int], b: Tuple[int, int, int, int]) -> Tuple[int, int, int, int]:
    left = min(a[0], b[0])
    top = min(a[1], b[1])
    right = max(a[0] + a[2], b[0] + b[2])
    bottom = max(a[1] + a[3], b[1] + b[3])
    return left, top, right - left, bottom - top


def _confidence(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return -1.0


def group_blocks(data: Dict[str, List[Any]], min_confidence: float = 0.0) -> List[TextRegion]:
    """
    Group image_to_data rows into block-level text regions.

    Block boxes come from the level-2 rows when present, otherwise from
    the union of the block's word boxes. Blocks without words are skipped.

    Args:
        data: Output of image_to_data(..., output_type=Output.DICT)
        min_confidence: Words below this confidence are dropped

    Returns:
        Regions in order of first appearance of each block
    """
    blocks: Dict[Tuple[int, int], _Block] = {}
    declared: Dict[Tuple[int, int], Tuple[int, int, int, int]] = {}

    for i, level in enumerate(data.get("level", [])):
        key = (int(data["page_num"][i]), int(data["block_num"][i]))
        box = (
            int(data["left"][i]),
            int(data["top"][i]),
            int(data["width"][i]),
            int(data["height"][i]),
        )
        block = blocks.setdefault(key, _Block())

        if int(level) == LEVEL_BLOCK:
            declared[key] = box
        elif int(level) == LEVEL_WORD:
            word = str(data["text"][i]).strip()
            if not word or _confidence(data["conf"][i]) < min_confidence:
                continue
            line_key = (int(data["par_num"][i]), int(data["line_num"][i]))
            block.add_word(line_key, word, box)

    regions = []
    for key, block in blocks.items():
        if not block.lines:
            continue
        x, y, width, height = declared.get(key, block.box)
        regions.append(TextRegion(text=block.text, x=x, y=y, width=width, height=height))
    return regions


class TextExtractor:
    """
    Tesseract-backed text region extractor.

    Attributes:
        language: Tesseract language code(s), e.g. "eng" or "eng+deu"
        config: Extra tesseract CLI flags
        min_confidence: Minimum word confidence (0-100)
        timeout: Seconds before tesseract is killed (0 = no limit)
    """

    def __init__(
        self,
        language: str = "eng",
        tesseract_cmd: Optional[str] = None,
        config: str = "",
        min_confidence: float = 0.0,
        timeout: float = 0.0,
        recognizer: Optional[Recognizer] = None,
    ) -> None:
        """
        Initialize text extractor.

        Args:
            language: Tesseract language code(s)
            tesseract_cmd: Path to the tesseract binary (PATH lookup if None)
            config: Extra tesseract CLI flags
            min_confidence: Minimum word confidence to keep
            timeout: Recognition timeout in seconds (0 = none)
            recognizer: Replaces Tesseract; called with an RGB array and
                must return image_to_data-style columns
        """
        self.language = language
        self.tesseract_cmd = tesseract_cmd
        self.config = config
        self.min_confidence = min_confidence
        self.timeout = timeout
        self._recognizer = recognizer

        logger.info(
            f"TextExtractor initialized: language={language}, "
            f"backend={'custom' if recognizer else 'tesseract'}"
        )

    def _init_recognizer(self) -> Recognizer:
        """Build the Tesseract recognizer on first use."""
        try:
            import pytesseract
        except ImportError:
            raise OcrFailed(
                "Text recognition unavailable: pytesseract is not installed"
            )

        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd

        def recognize(image: np.ndarray) -> Dict[str, List[Any]]:
            return pytesseract.image_to_data(
                image,
                lang=self.language,
                config=self.config,
                timeout=self.timeout,
                output_type=pytesseract.Output.DICT,
            )

        return recognize

    def extract(self, frame: Frame) -> List[TextRegion]:
        """
        Recognize text blocks in a frame.

        Args:
            frame: Frame to analyse

        Returns:
            Text regions in recognizer block order (possibly empty)

        Raises:
            OcrFailed: If the recognizer is unavailable, the frame cannot
                be converted, or recognition fails
        """
        if self._recognizer is None:
            self._recognizer = self._init_recognizer()

        try:
            rgb = frame_to_rgb(frame)
        except ConversionError as e:
            logger.error(f"OCR colour conversion failed: {e}")
            raise OcrFailed("Could not convert frame for text recognition")

        try:
            data = self._recognizer(rgb)
        except OcrFailed:
            raise
        except Exception as e:
            logger.error(f"Text recognition failed for {frame!r}: {e}")
            raise OcrFailed(f"Text recognition failed: {e}")

        try:
            regions = group_blocks(data, self.min_confidence)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Malformed recognizer output: {e}")
            raise OcrFailed("Text recognition returned malformed output")

        logger.debug(f"Recognized {len(regions)} text region(s) in {frame!r}")
        return regions
