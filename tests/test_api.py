"""
API Tests
=========

Route table, error envelope and snapshot endpoints, exercised through
FastAPI's TestClient.
"""

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from conftest import FailingInjector, make_bgr_frame
from mirror_gateway.api import create_app
from mirror_gateway.config import ApiConfig, Settings
from mirror_gateway.control import (
    ActionTranslator,
    AndroidKeyCode,
    CopyKey,
    InjectedCommand,
    KeyAction,
    LoggingInjector,
    Point,
    TouchAction,
)
from mirror_gateway.frames import Frame, ImageEncoder, ImageFormat, PixelFormat


API = "/api/v1"


class BrokenInjector(LoggingInjector):
    """Injector that crashes on rotate."""

    def rotate_device(self):
        raise RuntimeError("device went away")


def _decode(data: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)


class TestKeyRoutes:
    """Tests for key, button and text routes."""

    def test_keycode(self, client, injector):
        response = client.post(f"{API}/keycode", data={"keycode": "41", "action": "up"})

        assert response.status_code == 200
        assert response.json() == {"status": "success"}
        assert injector.history == [
            InjectedCommand("keycode", (AndroidKeyCode.M, KeyAction.UP)),
        ]

    def test_keycode_defaults_to_down(self, client, injector):
        client.post(f"{API}/keycode", data={"keycode": "3"})
        assert injector.history[-1].args == (AndroidKeyCode.HOME, KeyAction.DOWN)

    def test_unknown_keycode_is_sent_as_unknown(self, client, injector):
        response = client.post(f"{API}/keycode", data={"keycode": "abc"})
        assert response.status_code == 200
        assert injector.history[-1].args == (AndroidKeyCode.UNKNOWN, KeyAction.DOWN)

    @pytest.mark.parametrize(
        "path, keycode",
        [
            ("home", AndroidKeyCode.HOME),
            ("back", AndroidKeyCode.BACK),
            ("app_switch", AndroidKeyCode.APP_SWITCH),
            ("power", AndroidKeyCode.POWER),
            ("menu", AndroidKeyCode.MENU),
        ],
    )
    def test_buttons(self, client, injector, path, keycode):
        response = client.post(f"{API}/{path}", data={"action": "up"})

        assert response.status_code == 200
        assert injector.history == [InjectedCommand("keycode", (keycode, KeyAction.UP))]

    def test_button_without_body(self, client, injector):
        response = client.post(f"{API}/home")
        assert response.status_code == 200
        assert injector.history[-1].args == (AndroidKeyCode.HOME, KeyAction.DOWN)

    def test_back_or_screen_on(self, client, injector):
        client.post(f"{API}/back_or_screen_on", data={"action": "down"})
        assert injector.history[-1] == InjectedCommand("back_or_screen_on", (KeyAction.DOWN,))

    def test_volume(self, client, injector):
        client.post(f"{API}/volume", data={"direction": "up", "action": "up"})
        client.post(f"{API}/volume", data={"direction": "down"})

        assert [cmd.args for cmd in injector.history] == [
            (AndroidKeyCode.VOLUME_UP, KeyAction.UP),
            (AndroidKeyCode.VOLUME_DOWN, KeyAction.DOWN),
        ]

    def test_text(self, client, injector):
        response = client.post(f"{API}/text", data={"text": "hello world"})

        assert response.status_code == 200
        assert injector.history[-1] == InjectedCommand("text", ("hello world",))

    def test_text_not_cut_at_field_limit(self, client, injector):
        long_text = "x" * 100
        client.post(f"{API}/text", data={"text": long_text})
        assert injector.history[-1].args == (long_text,)

    def test_text_empty(self, client, injector):
        response = client.post(f"{API}/text", data={"text": ""})

        assert response.status_code == 400
        assert response.json() == {"error": "text must not be empty"}
        assert injector.history == []

    def test_long_field_is_truncated(self, client, injector):
        """Oversized control fields are cut to the limit, not rejected."""
        response = client.post(f"{API}/keycode", data={"keycode": "4" + " " * 64})
        assert response.status_code == 200
        assert injector.history[-1].args[0] is AndroidKeyCode.BACK


class TestDeviceRoutes:
    """Tests for panels, clipboard and device controls."""

    @pytest.mark.parametrize(
        "action, command",
        [
            ("expand_notification", "expand_notification_panel"),
            ("expand_settings", "expand_settings_panel"),
            ("collapse", "collapse_panels"),
        ],
    )
    def test_panel(self, client, injector, action, command):
        response = client.post(f"{API}/panel", data={"action": action})

        assert response.status_code == 200
        assert injector.history == [InjectedCommand(command)]

    def test_panel_unknown_action_is_noop(self, client, injector):
        response = client.post(f"{API}/panel", data={"action": "explode"})

        assert response.status_code == 200
        assert response.json() == {"status": "success"}
        assert injector.history == []

    def test_clipboard_get(self, client, injector):
        response = client.get(f"{API}/clipboard")

        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "Clipboard request sent"}
        assert injector.history == [InjectedCommand("get_clipboard", (CopyKey.COPY,))]

    def test_clipboard_put(self, client, injector):
        response = client.put(f"{API}/clipboard")

        assert response.status_code == 200
        assert response.json() == {"status": "success", "message": "Paste request sent"}
        assert injector.history == [InjectedCommand("paste_clipboard")]

    def test_clipboard_post(self, client, injector):
        assert client.post(f"{API}/clipboard", data={"action": "get"}).json()["message"] == (
            "Clipboard request sent"
        )
        assert client.post(f"{API}/clipboard", data={"action": "paste"}).json()["message"] == (
            "Paste request sent"
        )
        assert [cmd.name for cmd in injector.history] == ["get_clipboard", "paste_clipboard"]

    def test_clipboard_post_invalid(self, client, injector):
        response = client.post(f"{API}/clipboard", data={"action": "cut"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action. Must be 'get' or 'paste'"}
        assert injector.history == []

    def test_display_power(self, client, injector):
        client.post(f"{API}/display/power", data={"state": "on"})
        client.post(f"{API}/display/power", data={"state": "off"})

        assert [cmd.args for cmd in injector.history] == [(True,), (False,)]

    def test_rotate_and_keyboard_settings(self, client, injector):
        assert client.post(f"{API}/device/rotate").status_code == 200
        assert client.post(f"{API}/keyboard/settings").status_code == 200
        assert [cmd.name for cmd in injector.history] == [
            "rotate_device",
            "open_hard_keyboard_settings",
        ]


class TestVirtualFinger:
    """Tests for synthetic touch."""

    def test_touch_down(self, client, injector):
        response = client.post(
            f"{API}/virtual_finger",
            data={"action": "down", "x": "100", "y": "200"},
        )

        assert response.status_code == 200
        assert response.json() == {"status": "success"}
        assert injector.history == [
            InjectedCommand("touch", (TouchAction.DOWN, Point(100, 200))),
        ]

    def test_invalid_action(self, client, injector):
        response = client.post(
            f"{API}/virtual_finger",
            data={"action": "sideways", "x": "1", "y": "2"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid action. Must be 'down', 'up', or 'move'"}
        assert injector.history == []

    def test_missing_coordinates(self, client, injector):
        response = client.post(f"{API}/virtual_finger", data={"action": "up", "x": ""})

        assert response.status_code == 400
        assert response.json() == {"error": "x and y coordinates are required"}
        assert injector.history == []

    def test_injection_failure(self, frame_store, encoder, settings):
        app = create_app(
            translator=ActionTranslator(FailingInjector()),
            frame_store=frame_store,
            encoder=encoder,
            settings=settings,
        )
        response = TestClient(app).post(
            f"{API}/virtual_finger",
            data={"action": "move", "x": "1", "y": "1"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to simulate virtual finger"}


class TestFrameRoutes:
    """Tests for /frame and /frame/ocr."""

    def test_frame_before_publish(self, client):
        response = client.get(f"{API}/frame")

        assert response.status_code == 503
        assert response.json() == {"error": "No frame available"}

    def test_frame_png_by_default(self, client, frame_store):
        frame_store.publish(make_bgr_frame(8, 6))
        response = client.get(f"{API}/frame")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert _decode(response.content).shape == (6, 8, 3)

    def test_frame_jpeg_on_accept(self, client, frame_store):
        frame_store.publish(make_bgr_frame(8, 6))
        response = client.get(f"{API}/frame", headers={"Accept": "image/jpeg"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content[:2] == b"\xff\xd8"

    def test_frame_content_type_matches_bytes(self, injector, frame_store, settings):
        """An unavailable format falls back to PNG with a PNG content type."""
        app = create_app(
            translator=ActionTranslator(injector),
            frame_store=frame_store,
            encoder=ImageEncoder(formats=frozenset({ImageFormat.PNG})),
            settings=settings,
        )
        frame_store.publish(make_bgr_frame())
        response = TestClient(app).get(f"{API}/frame", headers={"Accept": "image/webp"})

        assert response.headers["content-type"] == "image/png"
        assert response.content[:8] == b"\x89PNG\r\n\x1a\n"

    def test_frame_encode_failure(self, client, frame_store):
        frame_store.publish(
            Frame(
                width=3,
                height=3,
                pixel_format=PixelFormat.YUV420P,
                planes=(b"\x00" * 9, b"\x00" * 4, b"\x00" * 4),
                strides=(3, 2, 2),
            )
        )
        response = client.get(f"{API}/frame")

        assert response.status_code == 500
        assert response.json() == {"error": "Could not convert frame"}

    def test_ocr(self, client, frame_store, sample_frame):
        frame_store.publish(sample_frame)
        response = client.get(f"{API}/frame/ocr")

        assert response.status_code == 200
        assert response.json() == {
            "texts": [
                {"text": "Hello world\nagain", "x": 10, "y": 10, "width": 100, "height": 30},
                {"text": "Last noise", "x": 5, "y": 100, "width": 60, "height": 20},
            ]
        }

    def test_ocr_before_publish(self, client):
        response = client.get(f"{API}/frame/ocr")
        assert response.status_code == 503

    def test_ocr_disabled(self, injector, frame_store, encoder, settings, sample_frame):
        app = create_app(
            translator=ActionTranslator(injector),
            frame_store=frame_store,
            encoder=encoder,
            text_extractor=None,
            settings=settings,
        )
        frame_store.publish(sample_frame)
        response = TestClient(app).get(f"{API}/frame/ocr")

        assert response.status_code == 500
        assert response.json() == {"error": "Text recognition is disabled"}


class TestRouting:
    """Tests for unmatched routes and response headers."""

    def test_unexpected_error(self, frame_store, encoder, settings):
        """An unhandled exception becomes a generic 500 with Connection: close."""
        app = create_app(
            translator=ActionTranslator(BrokenInjector()),
            frame_store=frame_store,
            encoder=encoder,
            settings=settings,
        )
        response = TestClient(app, raise_server_exceptions=False).post(f"{API}/device/rotate")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["connection"] == "close"

    def test_unknown_path(self, client):
        response = client.get(f"{API}/nonexistent")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_unversioned_path(self, client):
        assert client.post("/home").status_code == 404

    def test_trailing_slash_is_not_redirected(self, client):
        response = client.post(f"{API}/home/", follow_redirects=False)
        assert response.status_code == 404

    def test_wrong_method(self, client, injector):
        response = client.get(f"{API}/home")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
        assert "POST" in response.headers["allow"]
        assert injector.history == []

    def test_connection_close(self, client):
        response = client.post(f"{API}/home")
        assert response.headers["connection"] == "close"

    def test_connection_close_on_error(self, client):
        response = client.get(f"{API}/frame")
        assert response.status_code == 503
        assert response.headers["connection"] == "close"

    def test_keep_alive(self, injector, frame_store, encoder):
        settings = Settings(api=ApiConfig(keep_alive=True))
        app = create_app(ActionTranslator(injector), frame_store, encoder, settings=settings)
        response = TestClient(app).post(f"{API}/home")
        assert "connection" not in response.headers

    def test_custom_prefix(self, injector, frame_store, encoder):
        settings = Settings(api=ApiConfig(prefix="v2/"))
        app = create_app(ActionTranslator(injector), frame_store, encoder, settings=settings)
        client = TestClient(app)

        assert client.post("/v2/home").status_code == 200
        assert client.post(f"{API}/home").status_code == 404
