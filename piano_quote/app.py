"""Piano quote intake service."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings
from .errors import QuoteError, ValidationError
from .models import QuoteRequest
from .quote_runner import QuoteRunner, build_runner
from .validation import MISSING_FIELDS, REQUIRED_FIELDS

_handlers: list[logging.Handler] = [logging.StreamHandler()]
if os.getenv("LOG_FILE", "").strip():
    _handlers.append(logging.FileHandler(os.getenv("LOG_FILE", "").strip()))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    handlers=_handlers,
)
log = logging.getLogger("piano-quote")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(runner: QuoteRunner | None = None) -> FastAPI:
    """Build the app. Without a ``runner`` one is built from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.runner is None:
            app.state.runner = build_runner(Settings.from_env())
        log.info("Piano quote service starting up")
        yield
        log.info("Piano quote service shutting down")

    app = FastAPI(title="Piano Quote Intake", version=__version__, lifespan=lifespan)
    app.state.runner = runner
    app.state.started_at = datetime.now(timezone.utc)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.get("/health")
    async def health() -> dict:
        return {
            "service": "piano-quote",
            "status": "ok",
            "version": __version__,
            "uptime_seconds": (datetime.now(timezone.utc) - app.state.started_at).total_seconds(),
        }

    @app.options("/api/quote")
    async def quote_preflight() -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.post("/api/quote")
    async def submit_quote(request: Request) -> JSONResponse:
        try:
            payload = await request.json()
        except ValueError:
            return _error(400, "Invalid JSON body")
        if not isinstance(payload, dict):
            return _error(400, "Request body must be a JSON object")

        try:
            quote = QuoteRequest.model_validate(payload)
        except PydanticValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
            return _error(400, "Invalid field values", fields=fields)

        quote_runner: QuoteRunner | None = request.app.state.runner
        if quote_runner is None:
            return _error(500, "Service is not configured")

        try:
            result = await quote_runner.submit(quote)
        except ValidationError as exc:
            extra = {"fields": exc.fields}
            if exc.message == MISSING_FIELDS:
                extra["required"] = [wire for wire, _ in REQUIRED_FIELDS]
            return _error(400, exc.message, **extra)
        except QuoteError as exc:
            log.error("Quote %s failed: %s (%s)", exc.job_reference or "-", exc.message, type(exc).__name__)
            return _error(500, exc.message)
        except Exception as exc:
            log.exception("API error")
            return _error(500, str(exc))

        log.info("Quote %s accepted", result.job_reference)
        return JSONResponse(status_code=200, content=result.to_response(), headers=CORS_HEADERS)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
