"""
FastAPI application for the WeatherWise planner.

The planner web client runs on a separate origin, so CORS is enabled:
- `WEATHERWISE_CORS_ORIGINS`: comma-separated list of allowed origins;
- otherwise any localhost / 127.0.0.1 port is allowed, unless
  `WEATHERWISE_CORS_ALLOW_LOCAL=0`.
"""

from __future__ import annotations

import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from weatherwise.core.logging import configure_logging

from .routes import router

LOCAL_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request body",
                "errors": jsonable_encoder(exc.errors()),
            }
        },
    )


def _cors_origins() -> tuple[list[str], str | None]:
    origins = [o.strip() for o in os.getenv("WEATHERWISE_CORS_ORIGINS", "").split(",") if o.strip()]
    if origins:
        return origins, None
    allow_local = os.getenv("WEATHERWISE_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes"}
    return [], LOCAL_ORIGIN_REGEX if allow_local else None


def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(title="WeatherWise API", version="0.1.0")

    origins, origin_regex = _cors_origins()
    if origins or origin_regex:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_origin_regex=origin_regex,
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    application.add_exception_handler(RequestValidationError, _validation_error)
    application.include_router(router)
    return application


app = create_app()
