"""
Gateway Errors
==============

Error taxonomy shared by every gateway component.

Each error carries the HTTP status code it maps to. Handlers never
build error responses themselves: they raise one of these and the
router converts it into the `{"error": "..."}` envelope.

Status mapping:
    NoFrameAvailable    -> 503
    EncodeFailed        -> 500
    OcrFailed           -> 500
    InjectionFailed     -> 500
    InvalidAction       -> 400
    MissingCoordinates  -> 400
    MissingParameter    -> 400
    MethodNotAllowed    -> 405
    RouteNotFound       -> 404
"""


class GatewayError(Exception):
    """Base class for errors that are reported to the HTTP caller."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str = "") -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NoFrameAvailable(GatewayError):
    """Raised when a snapshot is requested before any frame was published."""

    status_code = 503
    default_message = "No frame available"


class EncodeFailed(GatewayError):
    """Raised when colour conversion or image encoding fails."""

    status_code = 500
    default_message = "Could not convert frame"


class OcrFailed(GatewayError):
    """Raised when the text recognizer cannot be initialized or run."""

    status_code = 500
    default_message = "Text recognition failed"


class InjectionFailed(GatewayError):
    """Raised when the injection subsystem reports a failed command."""

    status_code = 500
    default_message = "Injection failed"


class InvalidAction(GatewayError):
    """Raised when an action field holds a value outside its closed set."""

    status_code = 400
    default_message = "Invalid action"


class MissingCoordinates(GatewayError):
    """Raised when a touch event lacks usable x/y coordinates."""

    status_code = 400
    default_message = "x and y coordinates are required"


class MissingParameter(GatewayError):
    """Raised when a mandatory form field is absent or empty."""

    status_code = 400
    default_message = "Missing parameter"


class MethodNotAllowed(GatewayError):
    status_code = 405
    default_message = "Method not allowed"


class RouteNotFound(GatewayError):
    status_code = 404
    default_message = "Not found"
