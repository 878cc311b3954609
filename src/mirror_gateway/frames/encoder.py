"""
Image Encoder
=============

Encodes frames into still-image containers for the /frame endpoint.

PNG is the lossless baseline and must always be available. JPEG, BMP and
WebP are optional capabilities: they are probed once at construction with
`cv2.haveImageWriter` and silently excluded from negotiation when the
local OpenCV build lacks them.

Format negotiation follows the Accept header by substring match, in this
order: image/jpeg, image/bmp, image/webp, image/png. The first available
match wins; otherwise the configured default format is used.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

import cv2

from mirror_gateway.errors import EncodeFailed
from mirror_gateway.frames.convert import ConversionError, frame_to_bgr
from mirror_gateway.frames.frame import Frame


logger = logging.getLogger(__name__)


class ImageFormat(str, Enum):
    """Output containers the encoder knows about."""

    PNG = "png"
    JPEG = "jpeg"
    BMP = "bmp"
    WEBP = "webp"

    @property
    def media_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else f".{self.value}"

    @classmethod
    def parse(cls, value: str) -> "ImageFormat":
        """Parse a format name, accepting the common 'jpg' alias."""
        value = value.strip().lower()
        if value == "jpg":
            return cls.JPEG
        return cls(value)


BASELINE_FORMAT = ImageFormat.PNG

# Checked in order; the first available match wins.
_NEGOTIATION_ORDER: Tuple[ImageFormat, ...] = (
    ImageFormat.JPEG,
    ImageFormat.BMP,
    ImageFormat.WEBP,
    ImageFormat.PNG,
)


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """
    Encoded still image.

    Attributes:
        data: Container bytes
        format: Format actually produced (drives Content-Type)
        width: Source frame width
        height: Source frame height
    """

    data: bytes
    format: ImageFormat
    width: int
    height: int

    @property
    def media_type(self) -> str:
        return self.format.media_type

    def __repr__(self) -> str:
        return (
            f"EncodedImage({self.format.value}, {self.width}x{self.height}, "
            f"{len(self.data)} bytes)"
        )


def probe_formats() -> FrozenSet[ImageFormat]:
    """Return the formats the local OpenCV build can write."""
    available = {BASELINE_FORMAT}
    for fmt in ImageFormat:
        if fmt is BASELINE_FORMAT:
            continue
        try:
            if cv2.haveImageWriter(fmt.extension):
                available.add(fmt)
        except cv2.error as e:
            logger.warning(f"Could not probe {fmt.value} writer: {e}")
    return frozenset(available)


class ImageEncoder:
    """
    Frame to image-container encoder with a fixed capability set.

    Attributes:
        formats: Formats this encoder can produce
        default_format: Format used when negotiation finds no match

    Example:
        encoder = ImageEncoder(jpeg_quality=90)
        fmt = encoder.negotiate(request.headers.get("accept"))
        image = encoder.encode(frame, fmt)
        Response(image.data, media_type=image.media_type)
    """

    def __init__(
        self,
        jpeg_quality: int = 90,
        png_compression: int = 3,
        webp_quality: int = 90,
        default_format: ImageFormat = BASELINE_FORMAT,
        formats: Optional[FrozenSet[ImageFormat]] = None,
    ) -> None:
        """
        Initialize encoder.

        Args:
            jpeg_quality: JPEG quality 0-100
            png_compression: PNG zlib level 0-9
            webp_quality: WebP quality 1-100
            default_format: Fallback format; replaced by PNG if unavailable
            formats: Restrict the capability set (probed when None)
        """
        self.jpeg_quality = jpeg_quality
        self.png_compression = png_compression
        self.webp_quality = webp_quality

        probed = probe_formats() if formats is None else frozenset(formats)
        self._formats = probed | {BASELINE_FORMAT}

        if default_format not in self._formats:
            logger.warning(
                f"Default format {default_format.value} unavailable, "
                f"falling back to {BASELINE_FORMAT.value}"
            )
            default_format = BASELINE_FORMAT
        self.default_format = default_format

        logger.info(
            "ImageEncoder initialized: formats="
            f"{sorted(fmt.value for fmt in self._formats)}, "
            f"default={self.default_format.value}"
        )

    @property
    def formats(self) -> FrozenSet[ImageFormat]:
        return self._formats

    def supports(self, fmt: ImageFormat) -> bool:
        return fmt in self._formats

    def negotiate(self, accept: Optional[str]) -> ImageFormat:
        """
        Pick an output format from an Accept header.

        Args:
            accept: Raw Accept header value (may be None)

        Returns:
            First available format whose media type appears in the header,
            or the default format.
        """
        if accept:
            accept = accept.lower()
            for fmt in _NEGOTIATION_ORDER:
                if fmt in self._formats and fmt.media_type in accept:
                    return fmt
        return self.default_format

    def _params(self, fmt: ImageFormat) -> List[int]:
        if fmt is ImageFormat.JPEG:
            return [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality]
        if fmt is ImageFormat.PNG:
            return [cv2.IMWRITE_PNG_COMPRESSION, self.png_compression]
        if fmt is ImageFormat.WEBP:
            return [cv2.IMWRITE_WEBP_QUALITY, self.webp_quality]
        return []

    def encode(self, frame: Frame, fmt: ImageFormat = BASELINE_FORMAT) -> EncodedImage:
        """
        Encode a frame.

        Args:
            frame: Frame to encode
            fmt: Output format (must be in the capability set)

        Returns:
            EncodedImage whose format is the one actually produced

        Raises:
            EncodeFailed: If the format is unavailable, colour conversion
                fails, or the OpenCV encoder fails
        """
        if fmt not in self._formats:
            raise EncodeFailed(f"Image format {fmt.value} is not available")

        try:
            bgr = frame_to_bgr(frame)
        except ConversionError as e:
            logger.error(f"Colour conversion failed: {e}")
            raise EncodeFailed("Could not convert frame")

        try:
            ok, buffer = cv2.imencode(fmt.extension, bgr, self._params(fmt))
        except cv2.error as e:
            logger.error(f"{fmt.value} encoder error for {frame!r}: {e}")
            raise EncodeFailed(f"Could not encode frame as {fmt.value}")

        if not ok:
            logger.error(f"{fmt.value} encoder returned failure for {frame!r}")
            raise EncodeFailed(f"Could not encode frame as {fmt.value}")

        return EncodedImage(
            data=buffer.tobytes(),
            format=fmt,
            width=frame.width,
            height=frame.height,
        )
