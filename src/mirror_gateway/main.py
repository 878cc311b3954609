"""
Mirror Gateway Entry Point
==========================

Command-line runner for the gateway.

Runs the API with the dry-run LoggingInjector, which logs every control
command instead of delivering it. Useful for exercising clients and for
serving a fixed still image through /frame and /frame/ocr.

Usage:
    mirror-gateway --port 8080
    mirror-gateway --image screenshot.png --no-ocr
    mirror-gateway --config /etc/mirror-gateway/config.yaml
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

import cv2

from mirror_gateway import __version__
from mirror_gateway.config import load_config, setup_logging
from mirror_gateway.control import LoggingInjector
from mirror_gateway.frames import Frame, PixelFormat
from mirror_gateway.gateway import WebGateway


logger = logging.getLogger(__name__)


def load_image_frame(path: str) -> Frame:
    """
    Load a still image from disk as a BGR frame.

    Raises:
        ValueError: If OpenCV cannot read the file
    """
    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None:
        raise ValueError(f"Could not read image: {path}")
    return Frame.from_array(bgr, PixelFormat.BGR24)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mirror-gateway",
        description="HTTP control and snapshot gateway (dry-run injector)",
    )
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--host", help="Bind host (overrides config)")
    parser.add_argument("--port", type=int, help="Bind port (overrides config)")
    parser.add_argument("--image", help="Publish this image as the current frame")
    parser.add_argument("--no-ocr", action="store_true", help="Disable /frame/ocr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_config(args.config)
    if args.host:
        settings.server.host = args.host
    if args.port is not None:
        settings.server.port = args.port
    if args.no_ocr:
        settings.ocr.enabled = False
    setup_logging(settings)

    gateway = WebGateway(LoggingInjector(), settings)

    if args.image:
        try:
            gateway.publish_frame(load_image_frame(args.image))
        except ValueError as e:
            logger.error(str(e))
            return 2

    shutdown = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        shutdown.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    if not gateway.start():
        gateway.destroy()
        return 1

    try:
        while not shutdown.wait(0.5):
            if not gateway.running:
                logger.error("Web server stopped unexpectedly")
                return 1
    finally:
        gateway.stop()
        gateway.destroy()
        logger.info("Shutdown complete")

    return 0


if __name__ == "__main__":
    sys.exit(main())
