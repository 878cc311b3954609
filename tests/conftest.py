"""
Test Configuration
==================

Pytest fixtures and test configuration for mirror-gateway.
"""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from mirror_gateway.api import create_app
from mirror_gateway.config import OcrConfig, Settings
from mirror_gateway.control import ActionTranslator, LoggingInjector
from mirror_gateway.frames import Frame, FrameStore, ImageEncoder, PixelFormat
from mirror_gateway.ocr import TextExtractor


# (level, page, block, par, line, word, left, top, width, height, conf, text)
SAMPLE_OCR_ROWS = [
    (1, 1, 0, 0, 0, 0, 0, 0, 320, 240, -1, ""),
    (2, 1, 1, 0, 0, 0, 10, 10, 100, 30, -1, ""),
    (3, 1, 1, 1, 0, 0, 10, 10, 100, 30, -1, ""),
    (4, 1, 1, 1, 1, 0, 10, 10, 90, 12, -1, ""),
    (5, 1, 1, 1, 1, 1, 10, 10, 40, 12, 96, "Hello"),
    (5, 1, 1, 1, 1, 2, 55, 10, 45, 12, 91, "world"),
    (4, 1, 1, 1, 2, 0, 10, 25, 40, 12, -1, ""),
    (5, 1, 1, 1, 2, 1, 10, 25, 40, 12, 88, "again"),
    (2, 1, 2, 0, 0, 0, 200, 50, 50, 20, -1, ""),
    (5, 1, 2, 1, 1, 1, 200, 50, 50, 20, 0, " "),
    (2, 1, 3, 0, 0, 0, 5, 100, 60, 20, -1, ""),
    (5, 1, 3, 1, 1, 1, 5, 100, 30, 20, 95, "Last"),
    (5, 1, 3, 1, 1, 2, 40, 100, 25, 20, 12, "noise"),
]

_OCR_COLUMNS = (
    "level", "page_num", "block_num", "par_num", "line_num", "word_num",
    "left", "top", "width", "height", "conf", "text",
)


def ocr_data(rows):
    """Build image_to_data(..., Output.DICT) columns from row tuples."""
    return {name: [row[i] for row in rows] for i, name in enumerate(_OCR_COLUMNS)}


def make_bgr_frame(width: int = 4, height: int = 4, value=(0, 0, 255)) -> Frame:
    """Solid-colour BGR frame."""
    array = np.empty((height, width, 3), dtype=np.uint8)
    array[:, :] = value
    return Frame.from_array(array, PixelFormat.BGR24)


class FakeRecognizer:
    """Recognizer stand-in recording the images it was given."""

    def __init__(self, rows=None, error=None):
        self.rows = SAMPLE_OCR_ROWS if rows is None else rows
        self.error = error
        self.images = []

    def __call__(self, image):
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return ocr_data(self.rows)


class FailingInjector(LoggingInjector):
    """Injector whose reporting operations always fail."""

    def get_device_clipboard(self, copy_key):
        super().get_device_clipboard(copy_key)
        return False

    def inject_touch(self, action, point):
        super().inject_touch(action, point)
        return False

    def inject_text(self, text):
        super().inject_text(text)
        return False


@pytest.fixture
def injector():
    return LoggingInjector()


@pytest.fixture
def settings():
    return Settings(ocr=OcrConfig(enabled=False))


@pytest.fixture
def frame_store():
    return FrameStore()


@pytest.fixture
def encoder():
    return ImageEncoder()


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def text_extractor(recognizer):
    return TextExtractor(recognizer=recognizer)


@pytest.fixture
def sample_frame():
    return make_bgr_frame()


@pytest.fixture
def app(injector, frame_store, encoder, text_extractor, settings):
    return create_app(
        translator=ActionTranslator(injector),
        frame_store=frame_store,
        encoder=encoder,
        text_extractor=text_extractor,
        settings=settings,
    )


@pytest.fixture
def client(app):
    return TestClient(app)
