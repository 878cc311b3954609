"""
Colour Conversion
=================

Dedicated module for turning raw frames into RGB numpy matrices.

Design Rules:
    - This is the ONLY place in the codebase that interprets pixel planes
    - Honours per-plane row strides (padded lines are cropped)
    - Fails fast on short planes, bad strides and odd-sized 4:2:0 frames
    - Returns RGB (H, W, 3) uint8; callers convert to BGR for OpenCV I/O
"""

import logging

import cv2
import numpy as np

from mirror_gateway.frames.frame import Frame, PixelFormat


logger = logging.getLogger(__name__)


class ConversionError(Exception):
    """Raised when a frame cannot be converted to RGB."""
    pass


_PACKED_TO_RGB = {
    PixelFormat.GRAY: cv2.COLOR_GRAY2RGB,
    PixelFormat.BGR24: cv2.COLOR_BGR2RGB,
    PixelFormat.RGBA: cv2.COLOR_RGBA2RGB,
    PixelFormat.BGRA: cv2.COLOR_BGRA2RGB,
}


def _plane(frame: Frame, index: int, rows: int, row_bytes: int) -> np.ndarray:
    """
    View one plane as a (rows, row_bytes) matrix, dropping stride padding.

    Raises:
        ConversionError: If the stride is shorter than a row or the plane
            holds fewer bytes than `rows` lines need
    """
    data = frame.planes[index]
    stride = frame.strides[index]

    if stride < row_bytes:
        raise ConversionError(
            f"Plane {index} stride {stride} is shorter than row size {row_bytes}"
        )
    needed = stride * (rows - 1) + row_bytes
    if len(data) < needed:
        raise ConversionError(
            f"Plane {index} holds {len(data)} bytes, {needed} required"
        )

    return np.ndarray(
        shape=(rows, row_bytes),
        dtype=np.uint8,
        buffer=data,
        strides=(stride, 1),
    )


def _packed_to_rgb(frame: Frame) -> np.ndarray:
    channels = frame.pixel_format.bytes_per_pixel
    rows = _plane(frame, 0, frame.height, frame.width * channels)
    pixels = np.ascontiguousarray(rows)
    if channels > 1:
        pixels = pixels.reshape(frame.height, frame.width, channels)

    if frame.pixel_format == PixelFormat.RGB24:
        return pixels
    return cv2.cvtColor(pixels, _PACKED_TO_RGB[frame.pixel_format])


def _yuv420_to_rgb(frame: Frame) -> np.ndarray:
    width, height = frame.width, frame.height
    if width % 2 or height % 2:
        raise ConversionError(
            f"{frame.pixel_format.value} frames require even dimensions, "
            f"got {width}x{height}"
        )

    luma = _plane(frame, 0, height, width)

    if frame.pixel_format == PixelFormat.YUV420P:
        u = _plane(frame, 1, height // 2, width // 2)
        v = _plane(frame, 2, height // 2, width // 2)
        i420 = np.concatenate([luma.ravel(), u.ravel(), v.ravel()])
        i420 = i420.reshape(height * 3 // 2, width)
        return cv2.cvtColor(i420, cv2.COLOR_YUV2RGB_I420)

    uv = _plane(frame, 1, height // 2, width)
    nv12 = np.vstack([luma, uv])
    return cv2.cvtColor(nv12, cv2.COLOR_YUV2RGB_NV12)


def frame_to_rgb(frame: Frame) -> np.ndarray:
    """
    Convert a frame of any supported pixel format to RGB.

    Args:
        frame: Frame to convert

    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8

    Raises:
        ConversionError: If the planes are inconsistent with the declared
            layout or OpenCV rejects the conversion
    """
    try:
        if frame.pixel_format in (PixelFormat.YUV420P, PixelFormat.NV12):
            rgb = _yuv420_to_rgb(frame)
        else:
            rgb = _packed_to_rgb(frame)
    except cv2.error as e:
        raise ConversionError(f"OpenCV conversion failed for {frame!r}: {e}")

    if rgb.shape != (frame.height, frame.width, 3):
        raise ConversionError(
            f"Unexpected RGB shape for {frame!r}: {rgb.shape}"
        )
    return rgb


def frame_to_bgr(frame: Frame) -> np.ndarray:
    """
    Convert a frame to BGR, the channel order OpenCV encoders expect.

    Raises:
        ConversionError: Same conditions as frame_to_rgb
    """
    rgb = frame_to_rgb(frame)
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
