"""Entry point for the upload server."""

import logging
import os
import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from server import config
from server.cleanup_task import TempFileReaper
from server.exceptions import (
    NasException,
    ValidationError,
    InvalidPathError,
    UploadSessionNotFoundError,
    StorageUnavailableError,
    StorageIOError,
)
from server.routes.upload_routes import router as upload_router

logger = setup_logging('server')

app = FastAPI(
    title="LAN NAS Upload Server",
    description="Local-network file manager upload API with chunked reassembly",
    version="1.0.0"
)

cleanup_task = TempFileReaper()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Make sure the storage root exists and start the temp file reaper.
    """
    logger.info("Upload server starting up...")

    if not os.path.exists(config.STORAGE_PATH):
        try:
            os.makedirs(config.STORAGE_PATH)
            logger.info(f"Created storage directory {config.STORAGE_PATH}")
        except OSError as e:
            logger.warning(f"Could not create storage directory {config.STORAGE_PATH}: {e}")

    await cleanup_task.start()
    logger.info("Background cleanup task started")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Stop background tasks on application shutdown.
    """
    logger.info("Upload server shutting down...")

    await cleanup_task.stop()
    logger.info("Cleanup task stopped")


# Handlers resolve by closest class in the MRO.
ERROR_MAPPING = [
    (InvalidPathError, status.HTTP_400_BAD_REQUEST, "INVALID_PATH", logging.WARNING),
    (ValidationError, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", logging.WARNING),
    (UploadSessionNotFoundError, status.HTTP_404_NOT_FOUND, "UPLOAD_SESSION_NOT_FOUND", logging.WARNING),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "STORAGE_UNAVAILABLE", logging.ERROR),
    (StorageIOError, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_IO_ERROR", logging.ERROR),
    (NasException, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", logging.ERROR),
]


def _make_error_handler(status_code: int, code: str, level: int):
    async def handler(request: Request, exc: NasException) -> JSONResponse:
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.log(
            level,
            f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=status_code >= 500,
        )
        return JSONResponse(status_code=status_code, content={"error": str(exc), "code": code})
    return handler


for exc_class, status_code, code, level in ERROR_MAPPING:
    app.add_exception_handler(exc_class, _make_error_handler(status_code, code, level))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Request validation error: {exc.errors()} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": "Request validation failed",
            "code": "REQUEST_VALIDATION_ERROR",
            "detail": jsonable_encoder(exc.errors()),
        }
    )


app.include_router(upload_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "LAN NAS Upload Server API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "upload-server"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "server.main:app",
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
    )


if __name__ == "__main__":
    main()
