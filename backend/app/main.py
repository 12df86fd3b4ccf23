from __future__ import annotations
import time
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.errors import AppError, Internal
from app.logging_setup import configure_logging
from app.routes.system import router as system_router
from app.routes.auth import router as auth_router
from app.routes.games import router as games_router
from app.routes.challenges import router as challenges_router
from app.routes.submissions import router as submissions_router
from app.routes.reviews import router as reviews_router
from app.routes.leaderboard import router as leaderboard_router
import structlog

configure_logging(settings.log_level)
log = structlog.get_logger()

ROUTERS = (
    system_router,
    auth_router,
    games_router,
    challenges_router,
    submissions_router,
    reviews_router,
    leaderboard_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha,
             routes=len(app.routes))
    yield
    log.info("shutdown")


app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API: SKATE games between two skaters and moderated trick challenges",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in ROUTERS:
    app.include_router(router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("unhandled_error", path=request.url.path, method=request.method)
    err = Internal("Internal server error")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


@app.middleware("http")
async def request_context(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        log.info("request", method=request.method, path=request.url.path, status=response.status_code,
                 ms=round((time.perf_counter() - started) * 1000, 1))
        return response
    finally:
        structlog.contextvars.clear_contextvars()
