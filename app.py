from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from routers.rooms import rooms_router
from schemas.rooms import HealthResponse
from signaling import SignalingServer
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STATIC_DIR
from logging_config import get_logger, setup_logging
import asyncio
import os

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def _page(name: str) -> FileResponse:
    path = os.path.join(STATIC_DIR, name)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="Page not found")
    return FileResponse(path)


def create_app(server: SignalingServer = None) -> FastAPI:
    """Build the application around its own signaling state."""
    server = server or SignalingServer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting signaling server")
        yield
        app.state.signaling.shutdown()
        logger.info("Signaling server stopped")

    app = FastAPI(title="Stream Signaling", lifespan=lifespan)
    app.state.signaling = server

    # Configure CORS, all origins unless CORS_ORIGINS narrows it
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router)

    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/")
    async def index():
        return _page("index.html")

    @app.get("/publisher")
    async def publisher_page():
        return _page("publisher.html")

    @app.get("/viewer")
    async def viewer_page():
        return _page("viewer.html")

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        signaling = app.state.signaling
        return HealthResponse(status="healthy", rooms=len(signaling.rooms), connections=len(signaling.connections))

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Signaling socket: one JSON frame in is one handling step.

        Outbound events are queued per connection and written by a separate
        task, so a slow client never stalls the handlers.
        """
        signaling: SignalingServer = websocket.app.state.signaling
        await websocket.accept()
        connection_id = signaling.connect()
        writer = asyncio.create_task(signaling.connections.pump(connection_id, websocket))
        message_count = 0
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                message_count += 1
                if message.get("text") is None:
                    logger.debug(f"Dropping non-text frame #{message_count} from connection {connection_id}")
                    continue
                logger.debug(f"Received message #{message_count} from connection {connection_id}")
                signaling.handle_message(connection_id, message["text"])
        except WebSocketDisconnect:
            logger.debug(f"WebSocket disconnected normally for connection {connection_id}")
        except Exception as e:
            logger.error(f"Error receiving message from connection {connection_id}: {e}", exc_info=True)
        finally:
            signaling.disconnect(connection_id)
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass

    logger.info("FastAPI application initialized")
    return app


app = create_app()
