from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from routers.rooms import rooms_router
from dispatcher import command_router
from connection import WebSocketConnection
from constants import CORS_ORIGINS, HEALTH_MESSAGE, LOG_FILE, LOG_LEVEL
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.get("/", response_class=PlainTextResponse)
@app.get("/health", response_class=PlainTextResponse)
async def health():
    return HEALTH_MESSAGE


@app.websocket("/")
async def websocket_endpoint(websocket: WebSocket):
    """Relay endpoint. Each frame is one TYPE:payload command; binary frames are read as UTF-8."""
    await websocket.accept()
    conn = WebSocketConnection(websocket)
    conn.start()
    command_router.connect(conn)
    logger.info(f"WebSocket connection {conn.connection_id} accepted from {websocket.client}")

    try:
        message_count = 0
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected normally for connection {conn.connection_id}")
                break
            frame = message.get("text")
            if frame is None:
                frame = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {conn.connection_id}: {frame}")
            command_router.dispatch(conn, frame)
    except Exception as e:
        logger.error(f"WebSocket error for connection {conn.connection_id}: {e}", exc_info=True)
    finally:
        command_router.disconnect(conn)
        await conn.stop()
        try:
            await websocket.close()
        except Exception as e:
            logger.debug(f"Error closing WebSocket: {e}")
