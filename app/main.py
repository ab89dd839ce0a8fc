import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root wherever uvicorn is started from
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.auth import router as auth_router
from app.api.push import router as push_router
from app.core.config import settings
from app.core.database import engine, init_db
from app.core.rate_limit import limiter
from app.logging import setup_logging

setup_logging(level=logging.INFO)
log = logging.getLogger("taskmanager")

STATIC_DIR = _PROJ_ROOT / "static"
if not STATIC_DIR.is_dir():
    STATIC_DIR = Path.cwd() / "static"
SERVICE_WORKER = STATIC_DIR / "service-worker.js"


def _cors_origins_list() -> list[str]:
    if not settings.cors_origins or settings.cors_origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


def _push_configured() -> bool:
    return bool(settings.vapid_public_key and settings.vapid_private_key)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.secret_key == "change-me-in-production" and settings.environment == "production":
        log.warning("SECRET_KEY is the default value; tokens can be forged")
    if _push_configured():
        log.info("VAPID keys loaded, web push enabled")
    else:
        log.warning("VAPID keys not found. Web push notifications will not work.")
    yield


app = FastAPI(
    title="Task Manager API",
    description="Authentication and web push subscriptions",
    lifespan=lifespan,
)
app.state.limiter = limiter


def _error_response(request: Request, status_code: int, detail: str, headers: dict | None = None) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    ip = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip() or (
        request.client.host if request.client else ""
    )
    log.warning("rate limit exceeded ip=%s path=%s", ip, request.url.path)
    return _error_response(request, 429, "Too many requests. Please wait a minute.")


app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errs = exc.errors()
    log.info("request validation error (400): path=%s method=%s", request.url.path, request.method)
    first = errs[0] if errs else {}
    msg = first.get("msg") or "Invalid request."
    rid = getattr(request.state, "request_id", None)
    # ctx may carry exception objects that are not JSON serializable
    detail = [{"loc": list(e.get("loc") or []), "msg": e.get("msg"), "type": e.get("type")} for e in errs]
    body = {"error": msg, "status_code": 400, "detail": detail}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=400, content=body)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(
        request,
        exc.status_code,
        exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc, exc_info=exc)
    return _error_response(request, 500, "Unexpected server error.")


@app.middleware("http")
async def request_id_and_latency(request: Request, call_next):
    request.state.request_id = str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    log.info(
        "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
        request.state.request_id,
        request.method,
        request.url.path,
        response.status_code,
        latency_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(push_router)


@app.get("/health")
def health():
    database = "ok"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        log.exception("health check: database unreachable")
        database = "error"
    return {"status": "ok", "database": database, "push_configured": _push_configured()}


@app.get("/service-worker.js", include_in_schema=False)
def service_worker():
    """Served from the root so the worker's scope covers the whole app."""
    if not SERVICE_WORKER.is_file():
        raise HTTPException(status_code=404, detail="Service worker not found.")
    return FileResponse(
        str(SERVICE_WORKER),
        media_type="application/javascript",
        headers={"Service-Worker-Allowed": "/", "Cache-Control": "no-cache"},
    )
