# chat_gateway/core/config.py
import os
from typing import List
from dotenv import load_dotenv


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings:
    """
    Setup environment variables.
        - CHAT_NAMESPACE the WebSocket path chat clients connect to
        - CHAT_HISTORY_LIMIT how many recent messages are replayed to joiners
        - CHAT_OUTBOX_SIZE pending outbound frames kept per connection
        - JWT_SECRET / JWT_ALGORITHM verify admin tokens on the HTTP surface
        - CORS_ORIGINS comma-separated list of allowed origins
        - LOG_LEVEL / LOG_FORMAT root logger level and line format
    """

    # Load environment variables from the .env file
    load_dotenv()

    CHAT_NAMESPACE: str = os.getenv("CHAT_NAMESPACE", "/chat")
    CHAT_HISTORY_LIMIT: int = int(os.getenv("CHAT_HISTORY_LIMIT", "100"))
    CHAT_OUTBOX_SIZE: int = int(os.getenv("CHAT_OUTBOX_SIZE", "500"))

    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    CORS_ORIGINS: List[str] = _split_origins(os.getenv("CORS_ORIGINS", "*"))

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(asctime)s | %(levelname)s | %(name)s | %(message)s")

settings = Settings()
