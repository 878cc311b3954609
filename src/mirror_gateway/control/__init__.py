"""
Control Module
==============

Translation of wire-level control requests into injection commands.

Components:
    - actions: Closed enums for action fields and their wire decoders
    - keycodes: Static Android key-code table (total translation)
    - injector: InputInjector protocol and the LoggingInjector dry run
    - translator: ActionTranslator, one method per control surface
"""

from mirror_gateway.control.actions import (
    ClipboardAction,
    CopyKey,
    KeyAction,
    PanelAction,
    Point,
    TouchAction,
    VolumeDirection,
    display_power_from_wire,
)
from mirror_gateway.control.keycodes import KEYCODE_TABLE, AndroidKeyCode, translate_keycode
from mirror_gateway.control.injector import InjectedCommand, InputInjector, LoggingInjector
from mirror_gateway.control.translator import ActionTranslator


__all__ = [
    "ClipboardAction",
    "CopyKey",
    "KeyAction",
    "PanelAction",
    "Point",
    "TouchAction",
    "VolumeDirection",
    "display_power_from_wire",
    "KEYCODE_TABLE",
    "AndroidKeyCode",
    "translate_keycode",
    "InjectedCommand",
    "InputInjector",
    "LoggingInjector",
    "ActionTranslator",
]
