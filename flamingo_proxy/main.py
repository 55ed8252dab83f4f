from contextlib import asynccontextmanager
import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from dotenv import load_dotenv
from loguru import logger

from .config import cors_origins_from_env, get_settings
from .errors import InternalError, ProxyError
from .routers import airtable, chat, openai_proxy
from .utils import slog
from .utils.logging import configure_logging
from .utils.metrics import record_request, snapshot

UNMATCHED_ROUTE = "<unmatched>"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Refuse to start without credentials (raises ConfigError)
    settings = get_settings()
    logger.info(
        "Flamingo proxy starting (APP_ENV: {}, assistant: {})",
        settings.app_env,
        settings.assistant_id,
    )
    yield


load_dotenv()

app = FastAPI(title="Flamingo Proxy", version="1.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cors_origins_from_env(os.environ)),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _logging_middleware(request, call_next):
    start = time.perf_counter()
    req_id = slog.new_request_id()
    client_ip = request.client.host if request.client else None
    try:
        response = await call_next(request)
    except Exception as e:
        latency_ms = int((time.perf_counter() - start) * 1000)
        slog.log_event(
            "request.error",
            request_id=req_id,
            path=str(request.url.path),
            method=request.method,
            latency_ms=latency_ms,
            client_ip=client_ip,
            error=str(e),
            **slog.get_context(request),
        )
        logger.opt(exception=e).error("{} {} crashed", request.method, request.url.path)
        err = InternalError("Internal server error")
        response = JSONResponse(err.to_body(), status_code=err.status_code)
    else:
        latency_ms = int((time.perf_counter() - start) * 1000)
        slog.finalize_request_log(
            request_id=req_id,
            method=request.method,
            path=str(request.url.path),
            status=response.status_code,
            latency_ms=latency_ms,
            client_ip=client_ip,
            ctx=slog.get_context(request),
        )
    record_request(method=request.method, path=_route_path(request), latency_ms=latency_ms)

    response.headers["X-Request-ID"] = req_id
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def _route_path(request: Request) -> str:
    # route template, so unknown paths share one metrics key
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


@app.exception_handler(ProxyError)
async def _proxy_error_handler(request: Request, exc: ProxyError):
    if exc.status_code >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


@app.get("/healthz", response_class=PlainTextResponse)
def healthz():
    # Liveness only: never touches OpenAI or Airtable
    return "ok"


@app.get("/metrics")
def get_metrics():
    """Return in-process metrics (JSON)."""
    return snapshot()


app.include_router(chat.router)
app.include_router(openai_proxy.router)
app.include_router(airtable.router)
