# hub/settings.py
from __future__ import annotations

from pydantic import BaseModel
import os


# Connection parameters the store cannot run without
STORE_PARAMS = ("REDIS_URL", "STORE_NAMESPACE")


class Settings(BaseModel):
    APP_NAME: str = "nazolab-hub"

    # Store (Redis). Empty -> degraded mode
    REDIS_URL: str = ""
    STORE_NAMESPACE: str = ""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # WebSocket origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173,null"

    # Room a client lands in when it does not name one
    DEFAULT_ROOM_ID: str = "demo"

    def missing_store_params(self) -> list[str]:
        return [name for name in STORE_PARAMS if not str(getattr(self, name) or "").strip()]

    @property
    def store_configured(self) -> bool:
        return not self.missing_store_params()


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "nazolab-hub"),
        REDIS_URL=os.getenv("REDIS_URL", "").strip(),
        STORE_NAMESPACE=os.getenv("STORE_NAMESPACE", "").strip(),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,null",
        ),
        DEFAULT_ROOM_ID=os.getenv("DEFAULT_ROOM_ID", "demo").strip() or "demo",
    )
