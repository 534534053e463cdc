from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import session_store
from catalog_router import router as catalog_router
from chemsim.substances_v1 import list_substances
from config import (
    ALLOWED_ORIGINS,
    APP_TITLE,
    APP_VERSION,
    ENV,
    HOST,
    LOG_LEVEL,
    MAX_REQUEST_BYTES,
    PORT,
    RATE_LIMIT_SESSIONS_PER_WINDOW,
    RATE_LIMIT_WINDOW_SECONDS,
)
from guards import RequestIdMiddleware, RequestSizeLimitMiddleware, SessionCreateRateLimitMiddleware
from lab_router import router as lab_router
from state_change_router import router as state_change_router

logger = logging.getLogger("chemsim-engine-api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s %s starting (env=%s)", APP_TITLE, APP_VERSION, ENV)
    yield
    session_store.shutdown()


def create_app() -> FastAPI:
    app = FastAPI(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)

    # Starlette runs the last added middleware first: request id wraps everything.
    app.add_middleware(
        SessionCreateRateLimitMiddleware,
        window_sec=RATE_LIMIT_WINDOW_SECONDS,
        limit=RATE_LIMIT_SESSIONS_PER_WINDOW,
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=MAX_REQUEST_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(catalog_router)
    app.include_router(state_change_router)
    app.include_router(lab_router)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.get("/")
    def root() -> Dict[str, Any]:
        return {"ok": True, "service": APP_TITLE, "version": APP_VERSION}

    @app.get("/health")
    def health() -> Dict[str, Any]:
        session_store.expire_idle_sessions()
        return {
            "ok": True,
            "substances": len(list_substances()),
            "sessions": len(session_store.list_sessions()),
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())
