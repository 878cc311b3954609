"""
Action Translator
=================

Maps typed control requests onto InputInjector calls.

One method per control surface. Parameters are already decoded (see
control.actions); the translator applies the key-code table and turns
injector failure reports into InjectionFailed.
"""

import logging
from typing import Optional, Union

from mirror_gateway.control.actions import (
    CopyKey,
    KeyAction,
    PanelAction,
    Point,
    TouchAction,
    VolumeDirection,
)
from mirror_gateway.control.injector import InputInjector
from mirror_gateway.control.keycodes import AndroidKeyCode, translate_keycode
from mirror_gateway.errors import InjectionFailed


logger = logging.getLogger(__name__)


class ActionTranslator:
    """
    Dispatches control requests to an injection backend.

    Attributes:
        injector: Backend receiving the translated commands

    Example:
        translator = ActionTranslator(LoggingInjector())
        translator.key_event("41", KeyAction.UP)
        translator.virtual_finger(TouchAction.DOWN, Point(100, 200))
    """

    def __init__(self, injector: InputInjector) -> None:
        self.injector = injector

    def key_event(self, keycode: Union[int, str, None], action: KeyAction) -> AndroidKeyCode:
        """
        Send a key event.

        Unmapped codes are sent as AndroidKeyCode.UNKNOWN, not rejected.

        Returns:
            The translated key code that was dispatched
        """
        key = translate_keycode(keycode)
        if key is AndroidKeyCode.UNKNOWN and keycode not in (None, "", 0, "0"):
            logger.warning(f"Unmapped keycode {keycode!r}, sending UNKNOWN")
        self.injector.inject_keycode(key, action)
        return key

    def home(self, action: KeyAction) -> None:
        self.injector.press_home(action)

    def back(self, action: KeyAction) -> None:
        self.injector.press_back(action)

    def app_switch(self, action: KeyAction) -> None:
        self.injector.press_app_switch(action)

    def power(self, action: KeyAction) -> None:
        self.injector.press_power(action)

    def menu(self, action: KeyAction) -> None:
        self.injector.press_menu(action)

    def volume(self, direction: VolumeDirection, action: KeyAction) -> None:
        if direction is VolumeDirection.UP:
            self.injector.press_volume_up(action)
        else:
            self.injector.press_volume_down(action)

    def back_or_screen_on(self, action: KeyAction) -> None:
        self.injector.press_back_or_screen_on(action)

    def panel(self, action: Optional[PanelAction]) -> None:
        """Expand or collapse the status-bar panels. None is a no-op."""
        if action is PanelAction.EXPAND_NOTIFICATION:
            self.injector.expand_notification_panel()
        elif action is PanelAction.EXPAND_SETTINGS:
            self.injector.expand_settings_panel()
        elif action is PanelAction.COLLAPSE:
            self.injector.collapse_panels()
        else:
            logger.debug("Ignoring unknown panel action")

    def clipboard_get(self, copy_key: CopyKey = CopyKey.COPY) -> None:
        """
        Raises:
            InjectionFailed: If the clipboard request could not be sent
        """
        if not self.injector.get_device_clipboard(copy_key):
            raise InjectionFailed("Failed to request device clipboard")

    def clipboard_paste(self) -> None:
        self.injector.paste_clipboard()

    def set_display_power(self, on: bool) -> None:
        self.injector.set_display_power(on)

    def rotate_device(self) -> None:
        self.injector.rotate_device()

    def open_keyboard_settings(self) -> None:
        self.injector.open_hard_keyboard_settings()

    def virtual_finger(self, action: TouchAction, point: Point) -> None:
        """
        Raises:
            InjectionFailed: If the injector reports failure
        """
        if not self.injector.inject_touch(action, point):
            raise InjectionFailed("Failed to simulate virtual finger")

    def text(self, text: str) -> None:
        """
        Raises:
            InjectionFailed: If the injector reports failure
        """
        if not self.injector.inject_text(text):
            raise InjectionFailed("Failed to inject text")
