"""
Frames Module
=============

Current-frame storage and still-image encoding.

This module provides the snapshot side of the gateway:
    - Frame: Immutable raster handed over by the video pipeline
    - FrameStore: Thread-safe latest-frame slot (publish / snapshot)
    - ImageEncoder: PNG/JPEG/BMP/WebP encoding with Accept negotiation

Example:
    from mirror_gateway.frames import Frame, FrameStore, ImageEncoder

    store = FrameStore()
    store.publish(Frame.from_array(bgr_pixels))

    encoder = ImageEncoder()
    image = encoder.encode(store.snapshot(), encoder.negotiate("image/jpeg"))
"""

from mirror_gateway.frames.frame import Frame, PixelFormat
from mirror_gateway.frames.store import FrameStore
from mirror_gateway.frames.convert import ConversionError, frame_to_bgr, frame_to_rgb
from mirror_gateway.frames.encoder import (
    BASELINE_FORMAT,
    EncodedImage,
    ImageEncoder,
    ImageFormat,
)


__all__ = [
    "Frame",
    "PixelFormat",
    "FrameStore",
    "ConversionError",
    "frame_to_rgb",
    "frame_to_bgr",
    "BASELINE_FORMAT",
    "EncodedImage",
    "ImageEncoder",
    "ImageFormat",
]
