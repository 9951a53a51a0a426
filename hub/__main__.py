from __future__ import annotations

import uvicorn

from hub.settings import get_settings


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "hub.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
