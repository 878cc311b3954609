"""
Gateway Routes
==============

Route table and handlers for the control and snapshot API.

Endpoints (relative to the versioned prefix):
    POST /keycode            - Key event (keycode, action)
    POST /text               - Raw text input (text)
    POST /home, /back, /app_switch, /power, /menu, /back_or_screen_on
                             - Hardware buttons (action)
    POST /volume             - Volume buttons (direction, action)
    POST /panel              - Status-bar panels (action)
    GET  /clipboard          - Copy device clipboard
    PUT  /clipboard          - Paste into device
    POST /clipboard          - Either of the above (action=get|paste)
    POST /display/power      - Display on/off (state)
    POST /device/rotate      - Rotate device
    POST /keyboard/settings  - Open hard-keyboard settings
    POST /virtual_finger     - Synthetic touch (action, x, y)
    GET  /frame              - Current frame as an image
    GET  /frame/ocr          - Text regions of the current frame

Handlers raise GatewayError subclasses; app.py turns them into the
{"error": ...} envelope. A missing `action` field means DOWN everywhere.
"""

import logging
from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import FormData

from mirror_gateway.control import (
    ActionTranslator,
    ClipboardAction,
    KeyAction,
    PanelAction,
    Point,
    TouchAction,
    VolumeDirection,
    display_power_from_wire,
)
from mirror_gateway.errors import MissingParameter, OcrFailed
from mirror_gateway.frames import FrameStore, ImageEncoder
from mirror_gateway.models import OcrResponse, StatusResponse, TextRegionModel
from mirror_gateway.ocr import TextExtractor


logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Dependencies
# =============================================================================

class FormFields:
    """
    Bounded, by-name access to url-encoded body fields.

    Missing and empty fields both read as "". Values longer than the
    limit are truncated.
    """

    def __init__(self, form: FormData, limit: int) -> None:
        self._form = form
        self.limit = limit

    def get(self, name: str, limit: Optional[int] = None) -> str:
        value = self._form.get(name)
        if not isinstance(value, str):
            return ""
        return value[: limit or self.limit]


async def form_fields(request: Request) -> FormFields:
    form = await request.form()
    return FormFields(form, request.app.state.settings.api.max_field_length)


def get_translator(request: Request) -> ActionTranslator:
    return request.app.state.translator


def get_frame_store(request: Request) -> FrameStore:
    return request.app.state.frame_store


def get_encoder(request: Request) -> ImageEncoder:
    return request.app.state.encoder


def get_text_extractor(request: Request) -> Optional[TextExtractor]:
    return request.app.state.text_extractor


Fields = Annotated[FormFields, Depends(form_fields)]
Translator = Annotated[ActionTranslator, Depends(get_translator)]
Store = Annotated[FrameStore, Depends(get_frame_store)]
Encoder = Annotated[ImageEncoder, Depends(get_encoder)]
Extractor = Annotated[Optional[TextExtractor], Depends(get_text_extractor)]


def _ok(message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(StatusResponse(message=message).body())


# =============================================================================
# Key Events
# =============================================================================

@router.post("/keycode")
async def keycode(fields: Fields, translator: Translator) -> JSONResponse:
    logger.info("Handling keycode request")
    translator.key_event(
        fields.get("keycode"),
        KeyAction.from_wire(fields.get("action")),
    )
    return _ok()


@router.post("/text")
async def text(request: Request, fields: Fields, translator: Translator) -> JSONResponse:
    logger.info("Handling text request")
    value = fields.get("text", limit=request.app.state.settings.api.max_text_length)
    if not value:
        raise MissingParameter("text must not be empty")
    translator.text(value)
    return _ok()


def _button_route(path: str, label: str, press: Callable[[ActionTranslator, KeyAction], None]) -> None:
    async def handler(fields: Fields, translator: Translator) -> JSONResponse:
        logger.info(f"Handling {label} request")
        press(translator, KeyAction.from_wire(fields.get("action")))
        return _ok()

    handler.__name__ = path.strip("/")
    router.add_api_route(path, handler, methods=["POST"])


_button_route("/home", "home", ActionTranslator.home)
_button_route("/back", "back", ActionTranslator.back)
_button_route("/app_switch", "app switch", ActionTranslator.app_switch)
_button_route("/power", "power", ActionTranslator.power)
_button_route("/menu", "menu", ActionTranslator.menu)
_button_route("/back_or_screen_on", "back or screen on", ActionTranslator.back_or_screen_on)


@router.post("/volume")
async def volume(fields: Fields, translator: Translator) -> JSONResponse:
    logger.info("Handling volume request")
    translator.volume(
        VolumeDirection.from_wire(fields.get("direction")),
        KeyAction.from_wire(fields.get("action")),
    )
    return _ok()


# =============================================================================
# Device Controls
# =============================================================================

@router.post("/panel")
async def panel(fields: Fields, translator: Translator) -> JSONResponse:
    action = fields.get("action")
    logger.info(f"Handling panel action request: {action}")
    translator.panel(PanelAction.from_wire(action))
    return _ok()


@router.get("/clipboard")
async def clipboard_copy(translator: Translator) -> JSONResponse:
    logger.info("Handling clipboard copy request")
    translator.clipboard_get()
    return _ok("Clipboard request sent")


@router.put("/clipboard")
async def clipboard_paste(translator: Translator) -> JSONResponse:
    logger.info("Handling clipboard paste request")
    translator.clipboard_paste()
    return _ok("Paste request sent")


@router.post("/clipboard")
async def clipboard(fields: Fields, translator: Translator) -> JSONResponse:
    logger.info("Handling clipboard request")
    if ClipboardAction.from_wire(fields.get("action")) is ClipboardAction.GET:
        translator.clipboard_get()
        return _ok("Clipboard request sent")
    translator.clipboard_paste()
    return _ok("Paste request sent")


@router.post("/display/power")
async def display_power(fields: Fields, translator: Translator) -> JSONResponse:
    logger.info("Handling display power request")
    translator.set_display_power(display_power_from_wire(fields.get("state")))
    return _ok()


@router.post("/device/rotate")
async def rotate_device(translator: Translator) -> JSONResponse:
    logger.info("Handling rotate device request")
    translator.rotate_device()
    return _ok()


@router.post("/keyboard/settings")
async def keyboard_settings(translator: Translator) -> JSONResponse:
    logger.info("Handling keyboard settings request")
    translator.open_keyboard_settings()
    return _ok()


@router.post("/virtual_finger")
async def virtual_finger(fields: Fields, translator: Translator) -> JSONResponse:
    logger.info("Handling virtual finger request")
    action = TouchAction.from_wire(fields.get("action"))
    point = Point.from_wire(fields.get("x"), fields.get("y"))
    translator.virtual_finger(action, point)
    return _ok()


# =============================================================================
# Snapshot
# =============================================================================

@router.get("/frame")
async def frame(request: Request, store: Store, encoder: Encoder) -> Response:
    logger.info("Handling frame request")
    snapshot = store.snapshot()
    fmt = encoder.negotiate(request.headers.get("accept"))
    image = encoder.encode(snapshot, fmt)
    return Response(content=image.data, media_type=image.media_type)


@router.get("/frame/ocr")
async def frame_ocr(store: Store, extractor: Extractor) -> JSONResponse:
    logger.info("Handling frame OCR request")
    snapshot = store.snapshot()
    if extractor is None:
        raise OcrFailed("Text recognition is disabled")

    regions = extractor.extract(snapshot)
    payload = OcrResponse(
        texts=[TextRegionModel(**region.to_dict()) for region in regions]
    )
    return JSONResponse(payload.model_dump())
