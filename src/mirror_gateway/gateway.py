"""
Web Gateway
===========

Lifecycle owner of the gateway: listener socket, serve thread, and the
components the HTTP handlers share.

Threading model:
    - start() binds the listener synchronously, spawns ONE background
      thread running uvicorn's serve loop, and returns immediately
    - every request handler runs on that thread's event loop
    - the video pipeline calls publish_frame() from its own thread; the
      FrameStore is the only state shared with the serve thread
    - stop() sets uvicorn's exit flag, observed on the next loop tick
      (about 100 ms), not immediately
    - destroy() stops, joins the thread and closes the listener; it is
      idempotent and safe to call even if start() failed

Not provided: cancellation of in-flight requests and per-request
timeouts. A request being handled when stop() is called runs to
completion.

Example:
    gateway = WebGateway(LoggingInjector(), settings)
    if gateway.start():
        pipeline.on_frame = gateway.publish_frame
        ...
        gateway.stop()
    gateway.destroy()
"""

import logging
import socket
import threading
import time
from typing import Optional, Tuple

import uvicorn

from mirror_gateway.api import create_app
from mirror_gateway.config import Settings
from mirror_gateway.control import ActionTranslator, InputInjector
from mirror_gateway.frames import Frame, FrameStore, ImageEncoder, ImageFormat
from mirror_gateway.ocr import OCR_AVAILABLE, TextExtractor


logger = logging.getLogger(__name__)


class ListenerSocket:
    """
    Scoped owner of the listening TCP socket.

    The socket is acquired by open() and released by close(); close()
    may be called any number of times.
    """

    def __init__(self, host: str, port: int, backlog: int = 64) -> None:
        self.host = host
        self.port = port
        self.backlog = backlog
        self._sock: Optional[socket.socket] = None

    @property
    def sock(self) -> Optional[socket.socket]:
        return self._sock

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port), resolving an ephemeral port."""
        if self._sock is None or self._sock.fileno() == -1:
            return None
        host, port = self._sock.getsockname()[:2]
        return host, port

    def open(self) -> socket.socket:
        """
        Bind and listen.

        Raises:
            OSError: If the address cannot be bound
        """
        if self._sock is not None:
            return self._sock

        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(self.backlog)
        except OSError:
            sock.close()
            raise

        self._sock = sock
        return sock

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def __enter__(self) -> socket.socket:
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()


class WebGateway:
    """
    Explicitly constructed gateway instance.

    Attributes:
        settings: Gateway settings
        frame_store: Current-frame slot fed by the video pipeline
        translator: Control request dispatcher
        encoder: Snapshot encoder
        text_extractor: OCR backend (None when disabled)
        app: FastAPI application serving the API
    """

    def __init__(
        self,
        injector: InputInjector,
        settings: Optional[Settings] = None,
        frame_store: Optional[FrameStore] = None,
        encoder: Optional[ImageEncoder] = None,
        text_extractor: Optional[TextExtractor] = None,
    ) -> None:
        """
        Initialize gateway components. Does not bind or start anything.

        Args:
            injector: Injection backend receiving control commands
            settings: Gateway settings (defaults when None)
            frame_store: Shared frame store (created when None)
            encoder: Image encoder (built from settings when None)
            text_extractor: OCR backend (built from settings when None and
                OCR is enabled)
        """
        self.settings = settings or Settings()
        self.frame_store = frame_store or FrameStore()
        self.translator = ActionTranslator(injector)

        frame_cfg = self.settings.frame
        self.encoder = encoder or ImageEncoder(
            jpeg_quality=frame_cfg.jpeg_quality,
            png_compression=frame_cfg.png_compression,
            webp_quality=frame_cfg.webp_quality,
            default_format=ImageFormat.parse(frame_cfg.default_format),
        )

        ocr_cfg = self.settings.ocr
        if text_extractor is None and ocr_cfg.enabled and not OCR_AVAILABLE:
            logger.warning("OCR enabled but pytesseract is not installed; /frame/ocr will fail")
        if text_extractor is None and ocr_cfg.enabled:
            text_extractor = TextExtractor(
                language=ocr_cfg.language,
                tesseract_cmd=ocr_cfg.tesseract_cmd,
                config=ocr_cfg.config,
                min_confidence=ocr_cfg.min_confidence,
                timeout=ocr_cfg.timeout,
            )
        self.text_extractor = text_extractor

        self.app = create_app(
            translator=self.translator,
            frame_store=self.frame_store,
            encoder=self.encoder,
            text_extractor=self.text_extractor,
            settings=self.settings,
        )

        self._lock = threading.Lock()
        self._listener: Optional[ListenerSocket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    # =========================================================================
    # Frame producer interface
    # =========================================================================

    def publish_frame(self, frame: Frame) -> int:
        """Replace the current frame. Safe to call from any thread."""
        return self.frame_store.publish(frame)

    def clear_frame(self) -> None:
        self.frame_store.clear()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def running(self) -> bool:
        """Serve thread alive and not asked to exit."""
        server, thread = self._server, self._thread
        return (
            thread is not None
            and thread.is_alive()
            and server is not None
            and not server.should_exit
        )

    @property
    def started(self) -> bool:
        """Serve loop is accepting connections."""
        server = self._server
        return server is not None and server.started and self.running

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        listener = self._listener
        return listener.address if listener else None

    def start(self) -> bool:
        """
        Bind the listener and start the serve thread (non-blocking).

        Returns:
            True if the thread was started (or is already running),
            False if the address could not be bound.
        """
        server_cfg = self.settings.server

        with self._lock:
            if self.running:
                logger.warning("Web server already running")
                return True
            self._release(server_cfg.shutdown_timeout)

            listener = ListenerSocket(server_cfg.host, server_cfg.port, server_cfg.backlog)
            try:
                sock = listener.open()
            except OSError as e:
                logger.error(f"Could not bind to {server_cfg.host}:{server_cfg.port}: {e}")
                return False

            config = uvicorn.Config(
                self.app,
                log_config=None,
                lifespan="on",
                backlog=server_cfg.backlog,
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(
                target=self._serve,
                args=(server, sock),
                name="web_server",
                daemon=True,
            )

            try:
                thread.start()
            except RuntimeError as e:
                logger.error(f"Could not create web server thread: {e}")
                listener.close()
                return False

            self._listener = listener
            self._server = server
            self._thread = thread

        host, port = listener.address or (server_cfg.host, server_cfg.port)
        logger.info(f"Web server started on {host}:{port}")
        return True

    @staticmethod
    def _serve(server: uvicorn.Server, sock: socket.socket) -> None:
        try:
            server.run(sockets=[sock])
        except Exception:
            logger.exception("Web server loop crashed")
        finally:
            logger.info("Web server loop exited")

    def wait_started(self, timeout: float = 5.0) -> bool:
        """
        Block until the serve loop accepts connections.

        Returns:
            True once started, False on timeout or if the thread died.
        """
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self.started:
                return True
            thread = self._thread
            if thread is None or not thread.is_alive():
                return False
            time.sleep(0.02)
        return self.started

    def stop(self) -> None:
        """Ask the serve loop to exit on its next tick."""
        server = self._server
        if server is not None and not server.should_exit:
            logger.info("Stopping web server")
            server.should_exit = True

    def destroy(self) -> None:
        """Stop, join the serve thread and release the listener. Idempotent."""
        with self._lock:
            self._release(self.settings.server.shutdown_timeout)

    def _release(self, timeout: float) -> None:
        server, thread, listener = self._server, self._thread, self._listener
        self._server = self._thread = self._listener = None

        if server is not None:
            server.should_exit = True
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive() and server is not None:
                logger.warning("Web server did not stop in time, forcing exit")
                server.force_exit = True
                thread.join(1.0)
        if listener is not None:
            listener.close()

    def __enter__(self) -> "WebGateway":
        if not self.start():
            raise OSError(
                f"Could not bind to {self.settings.server.host}:{self.settings.server.port}"
            )
        return self

    def __exit__(self, *exc_info) -> None:
        self.destroy()
