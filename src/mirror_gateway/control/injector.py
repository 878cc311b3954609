"""
Input Injector
==============

Interface to the subsystem that physically delivers input to the device.

The gateway never talks to the device itself. It calls an object that
satisfies the InputInjector protocol, one method per control surface,
with already-decoded typed parameters.

Components:
    - InputInjector: Protocol every injection backend implements
    - LoggingInjector: Dry-run backend that logs and records commands

Design Philosophy:
    Injection is a pluggable black box. Methods that can report delivery
    failure return a bool; the rest are fire-and-forget.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Protocol, Tuple

from mirror_gateway.control.actions import CopyKey, KeyAction, Point, TouchAction
from mirror_gateway.control.keycodes import AndroidKeyCode


logger = logging.getLogger(__name__)


class InputInjector(Protocol):
    """
    Protocol for injection backends.

    Implemented by:
        - LoggingInjector (dry run, tests and CLI)
        - device backends supplied by the embedding application
    """

    def inject_keycode(self, keycode: AndroidKeyCode, action: KeyAction) -> None: ...

    def press_home(self, action: KeyAction) -> None: ...

    def press_back(self, action: KeyAction) -> None: ...

    def press_app_switch(self, action: KeyAction) -> None: ...

    def press_power(self, action: KeyAction) -> None: ...

    def press_menu(self, action: KeyAction) -> None: ...

    def press_volume_up(self, action: KeyAction) -> None: ...

    def press_volume_down(self, action: KeyAction) -> None: ...

    def press_back_or_screen_on(self, action: KeyAction) -> None: ...

    def expand_notification_panel(self) -> None: ...

    def expand_settings_panel(self) -> None: ...

    def collapse_panels(self) -> None: ...

    def get_device_clipboard(self, copy_key: CopyKey) -> bool: ...

    def paste_clipboard(self) -> None: ...

    def set_display_power(self, on: bool) -> None: ...

    def rotate_device(self) -> None: ...

    def open_hard_keyboard_settings(self) -> None: ...

    def inject_touch(self, action: TouchAction, point: Point) -> bool: ...

    def inject_text(self, text: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class InjectedCommand:
    """One command received by a LoggingInjector."""

    name: str
    args: Tuple = ()


class LoggingInjector:
    """
    Dry-run injection backend.

    Logs every command and keeps the most recent ones in `history`.
    Hardware buttons are expressed as key events, the way the device
    protocol does it.

    Attributes:
        history: Most recent commands, oldest first
        max_history: Bound on the history length
    """

    def __init__(self, max_history: int = 256) -> None:
        self.max_history = max_history
        self._history: Deque[InjectedCommand] = deque(maxlen=max_history)

    @property
    def history(self) -> List[InjectedCommand]:
        return list(self._history)

    def clear(self) -> None:
        self._history.clear()

    def _record(self, name: str, *args) -> None:
        self._history.append(InjectedCommand(name=name, args=args))
        logger.info(f"Inject {name}{args if args else ''}")

    def inject_keycode(self, keycode: AndroidKeyCode, action: KeyAction) -> None:
        self._record("keycode", keycode, action)

    def press_home(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.HOME, action)

    def press_back(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.BACK, action)

    def press_app_switch(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.APP_SWITCH, action)

    def press_power(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.POWER, action)

    def press_menu(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.MENU, action)

    def press_volume_up(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.VOLUME_UP, action)

    def press_volume_down(self, action: KeyAction) -> None:
        self.inject_keycode(AndroidKeyCode.VOLUME_DOWN, action)

    def press_back_or_screen_on(self, action: KeyAction) -> None:
        self._record("back_or_screen_on", action)

    def expand_notification_panel(self) -> None:
        self._record("expand_notification_panel")

    def expand_settings_panel(self) -> None:
        self._record("expand_settings_panel")

    def collapse_panels(self) -> None:
        self._record("collapse_panels")

    def get_device_clipboard(self, copy_key: CopyKey) -> bool:
        self._record("get_clipboard", copy_key)
        return True

    def paste_clipboard(self) -> None:
        self._record("paste_clipboard")

    def set_display_power(self, on: bool) -> None:
        self._record("display_power", on)

    def rotate_device(self) -> None:
        self._record("rotate_device")

    def open_hard_keyboard_settings(self) -> None:
        self._record("open_hard_keyboard_settings")

    def inject_touch(self, action: TouchAction, point: Point) -> bool:
        self._record("touch", action, point)
        return True

    def inject_text(self, text: str) -> bool:
        self._record("text", text)
        return True
