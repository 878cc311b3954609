"""
Mirror Gateway
==============

HTTP control and snapshot gateway for a mirrored device.

This package exposes a small REST-like API that turns form-encoded
requests into input-injection commands (keys, touch, panels, clipboard,
display power) and serves still images of the most recently decoded
video frame, optionally with recognized text regions.

Components:
    - frames: Frame model, thread-safe FrameStore, ImageEncoder
    - control: Action decoding, key-code table, InputInjector, translator
    - ocr: Optional Tesseract text extraction
    - api: FastAPI application and route table
    - gateway: WebGateway lifecycle (listener + serve thread)

Example:
    from mirror_gateway.gateway import WebGateway
    from mirror_gateway.control import LoggingInjector

    gateway = WebGateway(LoggingInjector())
    gateway.start()
    gateway.publish_frame(frame)  # from the video thread
    ...
    gateway.destroy()
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
