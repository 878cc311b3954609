"""
Key Codes
=========

Static translation table from wire key codes to Android key codes.

Wire codes use the Android numbering itself, so KEYCODE_TABLE maps each
AndroidKeyCode value to its own member: translation is a membership check
plus name parsing, not a renumbering.

The table is built once at import and exposed read-only. Translation is
total: anything outside the table (unknown integers, unparsable strings,
unknown names) becomes AndroidKeyCode.UNKNOWN. This is a permissive
policy, not a validation gate: unknown codes are still dispatched.

Wire formats accepted by translate_keycode:
    41            -> AndroidKeyCode.M
    "41"          -> AndroidKeyCode.M
    "M"           -> AndroidKeyCode.M
    "KEYCODE_M"   -> AndroidKeyCode.M
    "9999"        -> AndroidKeyCode.UNKNOWN
"""

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Union


class AndroidKeyCode(IntEnum):
    """Android KeyEvent key codes (android.view.KeyEvent.KEYCODE_*)."""

    UNKNOWN = 0
    SOFT_LEFT = 1
    SOFT_RIGHT = 2
    HOME = 3
    BACK = 4
    CALL = 5
    ENDCALL = 6
    DIGIT_0 = 7
    DIGIT_1 = 8
    DIGIT_2 = 9
    DIGIT_3 = 10
    DIGIT_4 = 11
    DIGIT_5 = 12
    DIGIT_6 = 13
    DIGIT_7 = 14
    DIGIT_8 = 15
    DIGIT_9 = 16
    STAR = 17
    POUND = 18
    DPAD_UP = 19
    DPAD_DOWN = 20
    DPAD_LEFT = 21
    DPAD_RIGHT = 22
    DPAD_CENTER = 23
    VOLUME_UP = 24
    VOLUME_DOWN = 25
    POWER = 26
    CAMERA = 27
    CLEAR = 28
    A = 29
    B = 30
    C = 31
    D = 32
    E = 33
    F = 34
    G = 35
    H = 36
    I = 37
    J = 38
    K = 39
    L = 40
    M = 41
    N = 42
    O = 43
    P = 44
    Q = 45
    R = 46
    S = 47
    T = 48
    U = 49
    V = 50
    W = 51
    X = 52
    Y = 53
    Z = 54
    COMMA = 55
    PERIOD = 56
    ALT_LEFT = 57
    ALT_RIGHT = 58
    SHIFT_LEFT = 59
    SHIFT_RIGHT = 60
    TAB = 61
    SPACE = 62
    SYM = 63
    EXPLORER = 64
    ENVELOPE = 65
    ENTER = 66
    DEL = 67
    GRAVE = 68
    MINUS = 69
    EQUALS = 70
    LEFT_BRACKET = 71
    RIGHT_BRACKET = 72
    BACKSLASH = 73
    SEMICOLON = 74
    APOSTROPHE = 75
    SLASH = 76
    AT = 77
    NUM = 78
    HEADSETHOOK = 79
    FOCUS = 80
    PLUS = 81
    MENU = 82
    NOTIFICATION = 83
    SEARCH = 84
    MEDIA_PLAY_PAUSE = 85
    MEDIA_STOP = 86
    MEDIA_NEXT = 87
    MEDIA_PREVIOUS = 88
    MEDIA_REWIND = 89
    MEDIA_FAST_FORWARD = 90
    MUTE = 91
    PAGE_UP = 92
    PAGE_DOWN = 93
    ESCAPE = 111
    FORWARD_DEL = 112
    CTRL_LEFT = 113
    CTRL_RIGHT = 114
    CAPS_LOCK = 115
    SCROLL_LOCK = 116
    META_LEFT = 117
    META_RIGHT = 118
    FUNCTION = 119
    SYSRQ = 120
    BREAK = 121
    MOVE_HOME = 122
    MOVE_END = 123
    INSERT = 124
    FORWARD = 125
    MEDIA_PLAY = 126
    MEDIA_PAUSE = 127
    F1 = 131
    F2 = 132
    F3 = 133
    F4 = 134
    F5 = 135
    F6 = 136
    F7 = 137
    F8 = 138
    F9 = 139
    F10 = 140
    F11 = 141
    F12 = 142
    NUM_LOCK = 143
    NUMPAD_0 = 144
    NUMPAD_1 = 145
    NUMPAD_2 = 146
    NUMPAD_3 = 147
    NUMPAD_4 = 148
    NUMPAD_5 = 149
    NUMPAD_6 = 150
    NUMPAD_7 = 151
    NUMPAD_8 = 152
    NUMPAD_9 = 153
    NUMPAD_DIVIDE = 154
    NUMPAD_MULTIPLY = 155
    NUMPAD_SUBTRACT = 156
    NUMPAD_ADD = 157
    NUMPAD_DOT = 158
    NUMPAD_COMMA = 159
    NUMPAD_ENTER = 160
    NUMPAD_EQUALS = 161
    VOLUME_MUTE = 164
    APP_SWITCH = 187
    BRIGHTNESS_DOWN = 220
    BRIGHTNESS_UP = 221
    SLEEP = 223
    WAKEUP = 224


KEYCODE_TABLE: Mapping[int, AndroidKeyCode] = MappingProxyType(
    {code.value: code for code in AndroidKeyCode}
)

# Digits are named 0-9 on the wire ("KEYCODE_5"), DIGIT_* in Python.
_NAME_TABLE: Mapping[str, AndroidKeyCode] = MappingProxyType(
    {
        **{code.name: code for code in AndroidKeyCode},
        **{str(d): AndroidKeyCode[f"DIGIT_{d}"] for d in range(10)},
    }
)


def translate_keycode(code: Union[int, str, None]) -> AndroidKeyCode:
    """
    Translate a wire key code to an Android key code.

    Args:
        code: Integer code, numeric string, or key name (with or without
            the KEYCODE_ prefix, case-insensitive)

    Returns:
        Mapped AndroidKeyCode, or AndroidKeyCode.UNKNOWN when the code is
        outside the table. Never raises.
    """
    if code is None:
        return AndroidKeyCode.UNKNOWN

    if isinstance(code, int):
        return KEYCODE_TABLE.get(code, AndroidKeyCode.UNKNOWN)

    text = str(code).strip()
    try:
        return KEYCODE_TABLE.get(int(text), AndroidKeyCode.UNKNOWN)
    except ValueError:
        pass

    name = text.upper().removeprefix("KEYCODE_")
    return _NAME_TABLE.get(name, AndroidKeyCode.UNKNOWN)
