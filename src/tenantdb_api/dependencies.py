"""FastAPI dependencies for accessing app state."""

from fastapi import HTTPException
from fastapi import Request
from fastapi import status

from tenantdb_api.settings import Settings


def get_settings(request: Request) -> Settings:
    """Get application settings from request state."""
    return request.app.state.settings


def get_orchestrator(request: Request):
    """
    Get the provisioning orchestrator from request state.

    Raises
    ------
    HTTPException
        503 when the workflow is disabled (no control database configured)
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Provisioning workflow is disabled (control_db_connection_string not set)",
        )
    return orchestrator


def get_work_item_repository(request: Request):
    """Get the work item repository from request state (503 when the workflow is disabled)."""
    repository = getattr(request.app.state, "work_item_repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Provisioning workflow is disabled (control_db_connection_string not set)",
        )
    return repository
