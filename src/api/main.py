from __future__ import annotations

from collections import defaultdict, deque
import os
import secrets
from threading import Lock
from time import time

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette import status

from src.api.routers import indicators, rules
from src.api.schemas import LogsResponse
from src.config.settings import get_settings
from src.utils.logger import get_log_buffer, get_logger


_security = HTTPBasic()
logger = get_logger(__name__)


def _auth_guard(credentials: HTTPBasicCredentials = Depends(_security)) -> None:
    settings = get_settings()
    if not settings.auth.enabled:
        return
    username_ok = secrets.compare_digest(credentials.username, settings.auth.username)
    password_ok = secrets.compare_digest(credentials.password, settings.auth.password)
    if not (username_ok and password_ok):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials")


class _RateLimiter:
    def __init__(self, rps: int, burst: int) -> None:
        self.rps = max(1, rps)
        self.burst = max(1, burst)
        self.window = 1.0
        self._buckets: dict[str, deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def allow(self, key: str) -> bool:
        now = time()
        with self._lock:
            bucket = self._buckets[key]
            while bucket and now - bucket[0] > self.window:
                bucket.popleft()
            if len(bucket) >= self.burst:
                return False
            bucket.append(now)
            return True


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app.name, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    rate_limit_enabled = os.getenv("API_RATE_LIMIT_ENABLED", "false").lower() == "true"
    limiter = _RateLimiter(
        rps=int(os.getenv("API_RATE_LIMIT_RPS", "5")),
        burst=int(os.getenv("API_RATE_LIMIT_BURST", "20")),
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if rate_limit_enabled:
            path = request.url.path
            if path not in ("/health", "/docs", "/redoc", "/openapi.json"):
                client = request.client.host if request.client else "unknown"
                if not limiter.allow(client):
                    logger.warning(f"Rate limit exceeded for {client}")
                    return JSONResponse(status_code=429, content={"detail": "rate limit exceeded"})
        return await call_next(request)

    dependencies = [Depends(_auth_guard)] if settings.auth.enabled else []
    app.include_router(rules.router, prefix="/api/v1", dependencies=dependencies)
    app.include_router(indicators.router, prefix="/api/v1", dependencies=dependencies)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/v1/logs", response_model=LogsResponse, dependencies=dependencies)
    def get_logs() -> LogsResponse:
        return LogsResponse(logs=get_log_buffer())

    logger.info(f"{settings.app.name} API ready (auth={'on' if settings.auth.enabled else 'off'})")
    return app


app = create_app()
