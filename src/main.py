from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.adapters.api.controllers.buses import router as buses_router
from src.adapters.api.controllers.locations import router as locations_router
from src.adapters.api.dependencies import get_config, get_vehicle_repository
from src.app.config import env_bool
from src.app.services.bootstrap_service import seed_vehicles
from src.domain.exceptions import (
    AlreadyAssigned,
    Conflict,
    InvalidInput,
    NotFound,
    PoolExhausted,
    StorageFailure,
    TrackingError,
)

logger = logging.getLogger("uvicorn.error")

_STATUS_BY_ERROR: dict[type[TrackingError], int] = {
    InvalidInput: 422,
    NotFound: 404,
    AlreadyAssigned: 409,
    Conflict: 409,
    PoolExhausted: 409,
    StorageFailure: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        await run_in_threadpool(
            seed_vehicles, get_vehicle_repository(), get_config().seed_vehicles
        )
    except Exception:
        logger.exception("Seeding bus numbers failed")
    yield


app = FastAPI(title="BusTrack", lifespan=lifespan)
app.include_router(buses_router)
app.include_router(locations_router)


@app.exception_handler(TrackingError)
async def tracking_error_handler(request: Request, exc: TrackingError) -> JSONResponse:
    status_code = next(
        (
            _STATUS_BY_ERROR[cls]
            for cls in type(exc).__mro__
            if cls in _STATUS_BY_ERROR
        ),
        500,
    )
    if status_code >= 500:
        logger.warning(
            "Tracking request failed: %s", exc, extra={"path": str(request.url.path)}
        )
    return JSONResponse(
        status_code=status_code, content={"detail": str(exc), "error": exc.code}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body and path validation failures share the InvalidInput error shape."""

    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "error": InvalidInput.code},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so map clients can display them."""

    logger.exception("Unhandled exception", extra={"path": str(request.url.path)})

    if env_bool("BUSTRACK_REVEAL_ERRORS", False):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"
    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
