"""FastAPI application exposing the reader engine to its collaborators.

WHY: The pieces around the engine — the screen scraper, the drag overlay,
and a settings/controls UI — run as separate processes or devices. They
need a small, documented surface to push text and gestures in and to read
words out, without sharing memory with the engine.

HOW: create_app() builds a FastAPI app that owns exactly one ReaderEngine
plus the TextCapture and GestureSession adapters wrapping it, all stored
on app.state. Route groups mirror the collaborator interfaces: capture,
gesture, playback, config, and output (JSON snapshots plus a WebSocket
stream of current_word). The lifespan hook closes the engine on shutdown.
main() configures logging and serves the app with uvicorn.

RULES:
- No module-level engine; each app instance owns its session
- Engine calls run on the server's event loop, so the timing loop does too
- Error responses use the ErrorResponse schema
- The WebSocket sends one JSON message per current_word update, null when
  playback stops; slow clients skip to the newest word
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rsvp_reader import __version__
from rsvp_reader.capture import TextCapture
from rsvp_reader.config import (
    GESTURE_REFERENCE_EXTENT,
    LOG_FORMAT,
    LOG_LEVEL,
    SERVER_HOST,
    SERVER_PORT,
)
from rsvp_reader.core.engine import ReaderEngine
from rsvp_reader.core.models import RSVPWord
from rsvp_reader.gesture import GestureSession, IndicatorState
from rsvp_reader.server.models import (
    CaptureRequest,
    CaptureResponse,
    ErrorResponse,
    GestureMoveRequest,
    GestureResponse,
    HealthResponse,
    IndicatorResponse,
    ModeRequest,
    SpeedRangeRequest,
    StateResponse,
    WordResponse,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _engine(request: Request) -> ReaderEngine:
    return request.app.state.engine


def _word_to_response(word: Optional[RSVPWord]) -> Optional[WordResponse]:
    if word is None:
        return None
    return WordResponse(text=word.text, speed=word.speed, is_paused=word.is_paused)


def _state_response(engine: ReaderEngine) -> StateResponse:
    """Snapshot the engine into a StateResponse."""
    speed_range = engine.speed_range
    return StateResponse(
        state=engine.get_state(),
        index=engine.index,
        last_displayed_index=engine.last_displayed_index,
        token_count=len(engine.tokens),
        speed=engine.current_speed.value,
        mode=engine.mode,
        min_wps=speed_range.min_wps,
        max_wps=speed_range.max_wps,
        word=_word_to_response(engine.current_word.value),
    )


def _gesture_response(engine: ReaderEngine, indicator: IndicatorState) -> GestureResponse:
    return GestureResponse(
        speed=engine.current_speed.value,
        state=engine.get_state(),
        indicator=IndicatorResponse(fraction=indicator.fraction, tone=indicator.tone),
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one line, e.g. "mode: Input should be ..."."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        message = err.get("msg", "invalid value")
        parts.append("{}: {}".format(location, message) if location else message)
    return "; ".join(parts) or "Invalid request"


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(
    engine: Optional[ReaderEngine] = None,
    reference_extent: float = GESTURE_REFERENCE_EXTENT,
) -> FastAPI:
    """Build the API around one reading session.

    Args:
        engine: Engine to serve; a default-configured one is created if None.
        reference_extent: Drag distance mapped to a full-scale offset when a
                          move request does not supply its own extent.

    Returns:
        A FastAPI app with the engine and adapters on ``app.state``.
    """
    session_engine = engine if engine is not None else ReaderEngine()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Close the reading session on shutdown."""
        logger.info("Reader session started")
        yield
        app.state.engine.close()
        logger.info("Reader session closed")

    app = FastAPI(
        lifespan=lifespan,
        title="RSVP Reader API",
        description=(
            "Feed scraped text and drag gestures into a word-at-a-time "
            "reading engine and read the displayed words back, as JSON "
            "snapshots or a live WebSocket stream."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.engine = session_engine
    app.state.capture = TextCapture(session_engine)
    app.state.gesture = GestureSession(session_engine, reference_extent=reference_extent)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = _describe_validation_error(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, detail)
        return JSONResponse(status_code=422, content=ErrorResponse(detail=detail).model_dump())

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    # -----------------------------------------------------------------
    # Capture
    # -----------------------------------------------------------------

    @app.post(
        "/capture",
        response_model=CaptureResponse,
        tags=["capture"],
        summary="Submit captured source text",
        description=(
            "Called by the scraper whenever visible content changes. Blank "
            "and unchanged text is ignored. While paused, the engine tries "
            "to resume at the same word in the new text."
        ),
    )
    async def capture(body: CaptureRequest, request: Request) -> CaptureResponse:
        engine = _engine(request)
        accepted = request.app.state.capture.capture_text(body.text)
        return CaptureResponse(
            accepted=accepted,
            token_count=len(engine.tokens),
            index=engine.index,
            state=engine.get_state(),
        )

    # -----------------------------------------------------------------
    # Gesture
    # -----------------------------------------------------------------

    @app.post(
        "/gesture/start",
        response_model=GestureResponse,
        tags=["gesture"],
        summary="Pointer down",
        description="Starts or resumes playback unless already playing.",
    )
    async def gesture_start(request: Request) -> GestureResponse:
        gesture = request.app.state.gesture
        gesture.start()
        return _gesture_response(_engine(request), gesture.indicator)

    @app.post(
        "/gesture/move",
        response_model=GestureResponse,
        tags=["gesture"],
        summary="Pointer move",
        description="Maps the drag distance to a signed speed and applies it.",
        responses={422: {"model": ErrorResponse, "description": "Invalid delta or extent"}},
    )
    async def gesture_move(body: GestureMoveRequest, request: Request) -> GestureResponse:
        indicator = request.app.state.gesture.move(body.delta, body.extent)
        return _gesture_response(_engine(request), indicator)

    @app.post(
        "/gesture/end",
        response_model=GestureResponse,
        tags=["gesture"],
        summary="Pointer up",
        description="Pauses playback if it is running.",
    )
    async def gesture_end(request: Request) -> GestureResponse:
        gesture = request.app.state.gesture
        gesture.end()
        return _gesture_response(_engine(request), gesture.indicator)

    # -----------------------------------------------------------------
    # Playback controls
    # -----------------------------------------------------------------

    @app.post("/playback/play", response_model=StateResponse, tags=["playback"], summary="Play")
    async def play(request: Request) -> StateResponse:
        engine = _engine(request)
        engine.play()
        return _state_response(engine)

    @app.post("/playback/pause", response_model=StateResponse, tags=["playback"], summary="Pause")
    async def pause(request: Request) -> StateResponse:
        engine = _engine(request)
        engine.pause()
        return _state_response(engine)

    @app.post("/playback/stop", response_model=StateResponse, tags=["playback"], summary="Stop")
    async def stop(request: Request) -> StateResponse:
        engine = _engine(request)
        engine.stop()
        return _state_response(engine)

    # -----------------------------------------------------------------
    # Configuration
    # -----------------------------------------------------------------

    @app.put(
        "/config/speed-range",
        response_model=StateResponse,
        tags=["config"],
        summary="Set the forward speed range",
        description="Values outside the supported bounds are clamped; max is raised to min if lower.",
    )
    async def set_speed_range(body: SpeedRangeRequest, request: Request) -> StateResponse:
        engine = _engine(request)
        engine.set_speed_range(body.min_wps, body.max_wps)
        return _state_response(engine)

    @app.put(
        "/config/mode",
        response_model=StateResponse,
        tags=["config"],
        summary="Set the display mode",
        responses={422: {"model": ErrorResponse, "description": "Unknown mode"}},
    )
    async def set_mode(body: ModeRequest, request: Request) -> StateResponse:
        engine = _engine(request)
        engine.set_mode(body.mode)
        return _state_response(engine)

    # -----------------------------------------------------------------
    # Output
    # -----------------------------------------------------------------

    @app.get("/state", response_model=StateResponse, tags=["output"], summary="Engine snapshot")
    async def get_state(request: Request) -> StateResponse:
        return _state_response(_engine(request))

    @app.get(
        "/word",
        response_model=Optional[WordResponse],
        tags=["output"],
        summary="Word on screen",
        description="The current word, or null when stopped.",
    )
    async def get_word(request: Request) -> Optional[WordResponse]:
        return _word_to_response(_engine(request).current_word.value)

    @app.websocket("/ws/words")
    async def stream_words(websocket: WebSocket) -> None:
        await websocket.accept()
        engine: ReaderEngine = websocket.app.state.engine
        logger.info("Word stream client connected")

        async def forward_words() -> None:
            async for word in engine.current_word.watch():
                payload = _word_to_response(word)
                await websocket.send_json(payload.model_dump() if payload else None)

        forwarder = asyncio.create_task(forward_words())
        try:
            # Inbound messages are ignored; receiving only detects disconnects
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Word stream client disconnected")
        finally:
            forwarder.cancel()
            try:
                await forwarder
            except (asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
                pass

    # -----------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["health"], summary="Liveness check")
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)


def main() -> None:
    """Serve the API with uvicorn.

    RULES:
    - Host, port, and log level come from config (RSVP_HOST, RSVP_PORT,
      RSVP_LOG_LEVEL)
    - Blocks until the server exits
    """
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    logger.info("Starting RSVP reader API on %s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(create_app(), host=SERVER_HOST, port=SERVER_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
