# hub/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis
from redis.exceptions import RedisError

from hub.domain.errors import ConfigurationUnavailable
from hub.settings import get_settings
from hub.store.doc_store import RedisDocStore
from hub.transport.admin import router as admin_router
from hub.transport.ws import router as ws_router
from hub.transport.ws_manager import SessionRegistry

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = [o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.redis = None
    app.state.store = None
    app.state.missing_store_params = settings.missing_store_params()
    app.state.registry = SessionRegistry()

    @app.on_event("startup")
    async def _startup() -> None:
        if app.state.missing_store_params:
            # reported once here; every subscribe/write is an inert no-op from now on
            logger.warning("%s; running without a store", ConfigurationUnavailable(app.state.missing_store_params))
            return
        r = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        await r.ping()
        app.state.redis = r
        app.state.store = RedisDocStore(r, namespace=settings.STORE_NAMESPACE)
        logger.info("store connected (namespace %s)", settings.STORE_NAMESPACE)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.registry.close_all()
        r = app.state.redis
        if r is not None:
            await r.aclose()

    @app.get("/health")
    async def health():
        r = app.state.redis
        if r is None:
            return {"ok": True, "store": "unavailable", "missing": app.state.missing_store_params}
        try:
            pong = await r.ping()
        except RedisError:
            logger.exception("Redis ping failed")
            return {"ok": False, "store": "down", "missing": []}
        return {"ok": True, "store": "up", "redis": str(pong), "missing": []}

    app.include_router(ws_router)
    app.include_router(admin_router)
    return app


app = create_app()
