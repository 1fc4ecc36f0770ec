import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.friends.router import router as friends_router
from app.api.health.router import router as health_router
from app.api.notifications.router import router as notifications_router
from app.core.config import settings
from app.core.errors import ErrorKind, ErrorReason, FriendshipError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.TRANSIENT: 503,
}

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Friend graph API: friends, friend requests and their notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(friends_router)
app.include_router(notifications_router)


@app.exception_handler(FriendshipError)
async def friendship_error_handler(request: Request, exc: FriendshipError):
    status_code = ERROR_STATUS[exc.kind]
    headers = None
    if exc.reason == ErrorReason.NOT_AUTHENTICATED:
        status_code = 401
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.kind == ErrorKind.TRANSIENT:
        logger.warning(f"Transient failure on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.kind.value,
            "reason": exc.reason.value,
            "detail": exc.message,
        },
        headers=headers,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level="info",
    )
