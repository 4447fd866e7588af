from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from api.config import settings
from api.exceptions import (
    ChallengeTrackerException,
    RateLimitError,
    create_error_response,
    generic_exception_handler,
    http_exception_handler,
    tracker_exception_handler,
    validation_exception_handler,
)
from api.logging_config import setup_logging
from api.rate_limit import check_rate_limit, close_redis, retry_after

logger = setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Ranked challenge API starting")
    yield
    await close_redis()


app = FastAPI(title="Ranked Challenge Tracker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        ip = request.client.host if request.client else "unknown"
        allowed, _ = await check_rate_limit(ip)
        if not allowed:
            exc = RateLimitError(retry_after())
            return JSONResponse(
                status_code=exc.status_code,
                content=create_error_response(exc.status_code, exc.message, exc.details),
            )
        response = await call_next(request)
        if "server" in response.headers:
            del response.headers["server"]
        return response

app.add_middleware(RateLimitMiddleware)

app.add_exception_handler(ChallengeTrackerException, tracker_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

@app.get("/healthz")
def health_check():
    return {"status": "ok"}

from api.routes.challenges import router as challenges_router
from api.routes.players import router as players_router
from api.routes.leaderboard import router as leaderboard_router
from api.routes.snapshots import router as snapshots_router
from api.routes.sync import router as sync_router

app.include_router(challenges_router)
app.include_router(players_router)
app.include_router(leaderboard_router)
app.include_router(snapshots_router)
app.include_router(sync_router)
