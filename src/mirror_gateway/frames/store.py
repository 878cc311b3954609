"""
Frame Store
===========

Thread-safe holder of the single most recent frame.

This module provides the FrameStore class, which is the ONLY shared
mutable state between the video pipeline and the HTTP handlers.

Design Rules:
    - At most one current frame at any instant
    - publish() swaps the reference under a lock; frames are immutable,
      so readers keep a valid reference after a later publish
    - snapshot() never blocks on the producer beyond the reference swap
    - Exposes minimal metrics for observability
"""

import logging
import threading
from typing import Optional

from mirror_gateway.errors import NoFrameAvailable
from mirror_gateway.frames.frame import Frame


logger = logging.getLogger(__name__)


class FrameStore:
    """
    Latest-frame slot shared by one writer and many readers.

    Attributes:
        sequence: Number of frames published so far
        has_frame: Whether a frame is currently available

    Example:
        store = FrameStore()

        # Producer thread
        store.publish(frame)

        # Reader (HTTP handler)
        frame = store.snapshot()  # raises NoFrameAvailable if empty
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._frame: Optional[Frame] = None
        self._sequence: int = 0
        self._cleared_count: int = 0

    @property
    def sequence(self) -> int:
        """Number of frames published so far."""
        with self._lock:
            return self._sequence

    @property
    def has_frame(self) -> bool:
        with self._lock:
            return self._frame is not None

    def publish(self, frame: Frame) -> int:
        """
        Replace the current frame.

        Args:
            frame: Newly decoded frame

        Returns:
            Sequence number assigned to the frame
        """
        if not isinstance(frame, Frame):
            raise TypeError(f"Expected Frame, got {type(frame).__name__}")

        with self._lock:
            self._frame = frame
            self._sequence += 1
            sequence = self._sequence

        if sequence == 1:
            logger.info(f"First frame published: {frame!r}")
        return sequence

    def clear(self) -> None:
        """Drop the current frame (e.g. when the video stream ends)."""
        with self._lock:
            had_frame = self._frame is not None
            self._frame = None
            if had_frame:
                self._cleared_count += 1
        if had_frame:
            logger.info("Current frame cleared")

    def peek(self) -> Optional[Frame]:
        """
        Get the current frame without raising.

        Returns:
            Current frame, or None if no frame is available.
        """
        with self._lock:
            return self._frame

    def snapshot(self) -> Frame:
        """
        Get a point-in-time reference to the current frame.

        Returns:
            The frame that was current when the lock was taken.

        Raises:
            NoFrameAvailable: If nothing was published (or the store
                was cleared since).
        """
        frame = self.peek()
        if frame is None:
            raise NoFrameAvailable()
        return frame

    def metrics(self) -> dict:
        """
        Get store metrics for observability.

        Returns:
            Dict with sequence, has_frame, cleared_count and the current
            frame's dimensions when one is available
        """
        with self._lock:
            frame = self._frame
            result = {
                "sequence": self._sequence,
                "has_frame": frame is not None,
                "cleared_count": self._cleared_count,
            }
        if frame is not None:
            result["width"] = frame.width
            result["height"] = frame.height
            result["pixel_format"] = frame.pixel_format.value
        return result
