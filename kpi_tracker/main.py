from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from kpi_tracker.api.routes import router
from kpi_tracker.infra.settings import get_cors_origins, get_log_level
from kpi_tracker.request_log import describe_validation_errors, log_rejected_request

app = FastAPI(title="soccer-kpi-tracker", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=get_log_level())

# Browser scorers and dashboards call the API cross-origin.
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _rejected_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Handlers never run for these, so log_request can't see them.
    route = request.scope.get("route")
    log_rejected_request(
        getattr(route, "name", None) or request.url.path,
        game_id=request.path_params.get("game_id"),
        request_id=request.headers.get("x-request-id"),
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        error_message=describe_validation_errors(exc.errors()),
    )
    return await request_validation_exception_handler(request, exc)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "soccer-kpi-tracker", "version": "0.1.0"}
