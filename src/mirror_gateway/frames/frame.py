"""
Frame Data Model
=================

Internal raster representation handed over by the video pipeline.

This module defines the typed Frame class that is used as the interface
between the decode pipeline (producer thread) and the HTTP handlers
(readers).

Design Rules:
    - Frames are immutable once constructed
    - Pixel planes are copied into `bytes` at construction, so a reader
      holding a reference can never see them overwritten by the producer
      reusing its buffer or by a later publish
    - Does NOT convert or encode pixels (see frames.convert / frames.encoder)
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class PixelFormat(str, Enum):
    """
    Pixel layouts accepted from the decode pipeline.

    Values follow the ffmpeg pix_fmt names.

    Attributes:
        GRAY: 8-bit luma, one plane
        RGB24: packed R, G, B
        BGR24: packed B, G, R (OpenCV native order)
        RGBA: packed R, G, B, A
        BGRA: packed B, G, R, A
        YUV420P: planar Y, U, V with 2x2 chroma subsampling (I420)
        NV12: planar Y followed by interleaved UV plane
    """

    GRAY = "gray"
    RGB24 = "rgb24"
    BGR24 = "bgr24"
    RGBA = "rgba"
    BGRA = "bgra"
    YUV420P = "yuv420p"
    NV12 = "nv12"

    @property
    def plane_count(self) -> int:
        return _PLANE_COUNTS[self]

    @property
    def bytes_per_pixel(self) -> int:
        """Bytes per pixel of the first plane."""
        return _BYTES_PER_PIXEL[self]


_PLANE_COUNTS = {
    PixelFormat.GRAY: 1,
    PixelFormat.RGB24: 1,
    PixelFormat.BGR24: 1,
    PixelFormat.RGBA: 1,
    PixelFormat.BGRA: 1,
    PixelFormat.YUV420P: 3,
    PixelFormat.NV12: 2,
}

_BYTES_PER_PIXEL = {
    PixelFormat.GRAY: 1,
    PixelFormat.RGB24: 3,
    PixelFormat.BGR24: 3,
    PixelFormat.RGBA: 4,
    PixelFormat.BGRA: 4,
    PixelFormat.YUV420P: 1,
    PixelFormat.NV12: 1,
}


@dataclass(frozen=True, slots=True)
class Frame:
    """
    One decoded raster image from the mirrored device.

    This is the canonical internal representation of a frame.
    It is immutable (frozen) to prevent accidental modification.

    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        pixel_format: Layout of the pixel planes
        planes: Raw pixel data, one `bytes` object per plane
        strides: Row stride (line size) in bytes, one per plane
        timestamp: UNIX timestamp when the frame was produced

    Raises:
        ValueError: If dimensions are not positive or the number of
            planes/strides does not match the pixel format, or a plane
            is not bytes-like
    """

    width: int
    height: int
    pixel_format: PixelFormat
    planes: Tuple[bytes, ...]
    strides: Tuple[int, ...]
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Frame dimensions must be positive, got {self.width}x{self.height}"
            )
        fmt = PixelFormat(self.pixel_format)
        object.__setattr__(self, "pixel_format", fmt)

        # Planes are snapshotted into bytes; the producer may reuse its buffer.
        try:
            planes = tuple(
                plane if type(plane) is bytes else bytes(memoryview(plane))
                for plane in self.planes
            )
            strides = tuple(int(stride) for stride in self.strides)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid planes or strides for {fmt.value} frame: {e}")
        object.__setattr__(self, "planes", planes)
        object.__setattr__(self, "strides", strides)

        if len(self.planes) != fmt.plane_count or len(self.strides) != fmt.plane_count:
            raise ValueError(
                f"{fmt.value} frames need {fmt.plane_count} plane(s), got "
                f"{len(self.planes)} plane(s) and {len(self.strides)} stride(s)"
            )

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        pixel_format: PixelFormat = PixelFormat.BGR24,
        timestamp: Optional[float] = None,
    ) -> "Frame":
        """
        Build a single-plane frame from an (H, W) or (H, W, C) uint8 array.

        The array is copied, so the caller may reuse its buffer afterwards.

        Args:
            array: Packed pixel data
            pixel_format: Layout of `array` (must be single-plane)
            timestamp: Optional production time, defaults to now

        Returns:
            Frame owning a copy of the pixels
        """
        fmt = PixelFormat(pixel_format)
        if fmt.plane_count != 1:
            raise ValueError(f"from_array only supports packed formats, not {fmt.value}")
        if array.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {array.dtype}")

        channels = 1 if array.ndim == 2 else array.shape[2]
        if channels != fmt.bytes_per_pixel:
            raise ValueError(
                f"{fmt.value} expects {fmt.bytes_per_pixel} channel(s), got {channels}"
            )

        height, width = array.shape[:2]
        data = np.ascontiguousarray(array).tobytes()
        return cls(
            width=width,
            height=height,
            pixel_format=fmt,
            planes=(data,),
            strides=(width * channels,),
            timestamp=time.time() if timestamp is None else timestamp,
        )

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the frame."""
        return self.width, self.height

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixel planes."""
        return (
            f"Frame({self.width}x{self.height}, "
            f"format={self.pixel_format.value}, "
            f"timestamp={self.timestamp:.3f})"
        )
