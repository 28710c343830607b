import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from buzzpulse.core.config import API_HOST, API_PORT, CORS_ORIGINS
from buzzpulse.core.errors import InvalidInput, NotFound, PulseError
from buzzpulse.core.logging import setup_logging
from buzzpulse.core.init_db import init_db
from buzzpulse.api.router import api_router
from buzzpulse.schemas.pulse import HealthResponse

SERVICE_NAME = "buzzpulse"

setup_logging()
logger.info("Starting BuzzPulse backend")


app = FastAPI(
    title="BuzzPulse Backend",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------
# Error envelope
# ------------------------------------------------------------------

def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": message, "code": code},
    )


@app.exception_handler(PulseError)
async def pulse_error_handler(request: Request, exc: PulseError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"{request.method} {request.url.path} invalid request: {exc.errors()}")
    return _error(400, InvalidInput.code, "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # routes are method specific, so a wrong method is an unmapped route too
    if exc.status_code in (404, 405):
        return _error(404, NotFound.code, "Not Found")
    return _error(exc.status_code, "HTTPError", str(exc.detail))


@app.middleware("http")
async def catch_unexpected(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception(f"{request.method} {request.url.path} crashed")
        return _error(500, "Internal", str(e))


# All API routes
app.include_router(api_router)

# Init DB after app is created
init_db()


@app.get("/health", response_model=HealthResponse)
def health():
    logger.debug("Health check hit")
    return HealthResponse(service=SERVICE_NAME)


def serve() -> None:
    """Start the uvicorn server using environment configuration."""
    uvicorn.run("buzzpulse.main:app", host=API_HOST, port=API_PORT, reload=False)


if __name__ == "__main__":
    serve()
