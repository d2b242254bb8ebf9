"""Error handling for the FastAPI application and provisioning exceptions."""

import pydantic
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from tenantdb_api.monitoring.logger import log_response_info
from tenantdb_api.workflow.exceptions import RunInProgressError
from tenantdb_api.workflow.exceptions import WorkItemSourceError

__all__ = [
    "handle_broad_exceptions",
    "handle_pydantic_validation_errors",
    "handle_run_in_progress",
    "handle_work_item_source_error",
]


# fastapi docs on middlewares: https://fastapi.tiangolo.com/tutorial/middleware/
async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        error_response = {"detail": "Internal server error", "error_type": type(err).__name__}

        logger.opt(exception=err).error(
            "Unhandled exception",
            http_status=500,
            http_method=request.method,
            url_path=str(request.url.path),
            error_type=type(err).__name__,
            error_message=str(err),
        )

        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response,
        )
        log_response_info(response)
        return response


# fastapi docs on error handlers: https://fastapi.tiangolo.com/tutorial/handling-errors/
async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "msg": error["msg"],
                "input": error["input"],
            }
            for error in errors
        ]
    }

    logger.warning(
        "Validation error",
        http_status=422,
        http_method=request.method,
        url_path=str(request.url.path),
        error_count=len(errors),
    )

    response = JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content=error_response,
    )
    log_response_info(response)

    return response


async def handle_run_in_progress(request: Request, exc: RunInProgressError) -> JSONResponse:
    """A provisioning run was triggered while another one is active -> 409 Conflict."""
    logger.warning("Provisioning run rejected", http_status=409, url_path=str(request.url.path))
    response = JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )
    log_response_info(response)
    return response


async def handle_work_item_source_error(request: Request, exc: WorkItemSourceError) -> JSONResponse:
    """The control database could not be read -> 503 Service Unavailable."""
    logger.error(
        "Work item source unavailable",
        http_status=503,
        url_path=str(request.url.path),
        error_message=str(exc),
    )
    response = JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )
    log_response_info(response)
    return response
