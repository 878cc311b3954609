"""
Action Kinds
============

Closed enumerations for every action-like form field, plus the decoders
that turn raw wire strings into them.

Decoding happens once, at the router boundary. Everything past the
router works with these types and never with raw strings.

Wire rules:
    - Key phase: "up" -> UP, anything else (including missing) -> DOWN
    - Touch action: "down" | "up" | "move", anything else -> InvalidAction
    - Touch coordinates: both required integers -> MissingCoordinates
    - Panel action: unknown values decode to None (silent no-op)
    - Volume direction: "up" -> UP, anything else -> DOWN
    - Display power: "on" -> True, anything else -> False
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from mirror_gateway.errors import InvalidAction, MissingCoordinates


class KeyAction(IntEnum):
    """Key phase (android.view.KeyEvent.ACTION_*)."""

    DOWN = 0
    UP = 1

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "KeyAction":
        return cls.UP if value == "up" else cls.DOWN


class TouchAction(IntEnum):
    """Touch phase (android.view.MotionEvent.ACTION_*)."""

    DOWN = 0
    UP = 1
    MOVE = 2

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "TouchAction":
        """
        Raises:
            InvalidAction: If value is not one of down, up, move
        """
        try:
            return _TOUCH_ACTIONS[value]
        except KeyError:
            raise InvalidAction("Invalid action. Must be 'down', 'up', or 'move'")


_TOUCH_ACTIONS = {
    "down": TouchAction.DOWN,
    "up": TouchAction.UP,
    "move": TouchAction.MOVE,
}


class PanelAction(str, Enum):
    EXPAND_NOTIFICATION = "expand_notification"
    EXPAND_SETTINGS = "expand_settings"
    COLLAPSE = "collapse"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> Optional["PanelAction"]:
        try:
            return cls(value)
        except ValueError:
            return None


class ClipboardAction(str, Enum):
    GET = "get"
    PASTE = "paste"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "ClipboardAction":
        """
        Raises:
            InvalidAction: If value is not get or paste
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidAction("Invalid action. Must be 'get' or 'paste'")


class CopyKey(IntEnum):
    """Key combination simulated before reading the device clipboard."""

    NONE = 0
    COPY = 1
    CUT = 2


class VolumeDirection(str, Enum):
    UP = "up"
    DOWN = "down"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "VolumeDirection":
        return cls.UP if value == "up" else cls.DOWN


def display_power_from_wire(value: Optional[str]) -> bool:
    return value == "on"


@dataclass(frozen=True, slots=True)
class Point:
    """Device-space touch position in pixels."""

    x: int
    y: int

    @classmethod
    def from_wire(cls, x: Optional[str], y: Optional[str]) -> "Point":
        """
        Parse x/y form fields.

        Raises:
            MissingCoordinates: If either field is missing, empty, or not
                an integer
        """
        if not x or not y:
            raise MissingCoordinates()
        try:
            return cls(x=int(x), y=int(y))
        except ValueError:
            raise MissingCoordinates("x and y coordinates must be integers")
