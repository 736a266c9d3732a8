# chat_gateway/main.py

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_gateway.core.config import settings
from chat_gateway.core.logging import setup_logging, get_logger
from chat_gateway.core.state import build_gateway
from chat_gateway.api.routes import root, health, metrics, chat
from chat_gateway.api import websocket as websocket_module
from chat_gateway.services.gateway import ChatGateway

# Configure logging first
setup_logging()
logger = get_logger(__name__)


def create_app(gateway: Optional[ChatGateway] = None) -> FastAPI:
    """
    Build the FastAPI application around one chat gateway.

    Args:
        gateway: Gateway to serve (a fresh one is built from settings if omitted)
    """
    app = FastAPI(title="Card Chat Gateway")
    app.state.chat_gateway = gateway or build_gateway()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # REST routes
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(chat.router)

    # WebSocket routes
    app.include_router(websocket_module.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "🚀 Chat gateway starting - namespace %s, history limit %d",
            settings.CHAT_NAMESPACE,
            app.state.chat_gateway.store.limit,
        )

    @app.on_event("shutdown")
    async def on_shutdown():
        app.state.chat_gateway.shutdown()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chat_gateway.main:app", host=settings.HOST, port=settings.PORT)
