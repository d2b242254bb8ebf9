"""
Provisioning API Routes

Trigger provisioning runs and inspect work items.
"""

from typing import List
from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi import status
from loguru import logger

from tenantdb_api.dependencies import get_orchestrator
from tenantdb_api.dependencies import get_work_item_repository
from tenantdb_api.schemas.schemas_provisioning import RunSummaryResponse
from tenantdb_api.schemas.schemas_provisioning import WorkItemResponse

ROUTER_PROVISIONING = APIRouter(tags=["Provisioning"], prefix="/provisioning")


@ROUTER_PROVISIONING.post(
    "/run",
    response_model=RunSummaryResponse,
    summary="Run provisioning now",
    description="Process every eligible work item once. Returns 409 if a run is already in progress.",
    responses={
        status.HTTP_409_CONFLICT: {"description": "A provisioning run is already in progress"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Workflow disabled or control database unavailable"},
    },
)
async def run_provisioning(orchestrator=Depends(get_orchestrator)) -> RunSummaryResponse:
    logger.info("Provisioning run requested via API")
    summary = await orchestrator.run()
    return RunSummaryResponse.from_summary(summary)


@ROUTER_PROVISIONING.get(
    "/work-items",
    response_model=List[WorkItemResponse],
    summary="List work items",
)
async def list_work_items(
    status_id: Optional[int] = Query(default=None, alias="status", description="Filter by project status id"),
    limit: int = Query(default=100, ge=1, le=1000),
    repository=Depends(get_work_item_repository),
) -> List[WorkItemResponse]:
    work_items = await repository.list_by_status(status_id, limit=limit)
    return [WorkItemResponse.from_work_item(item) for item in work_items]


@ROUTER_PROVISIONING.get(
    "/work-items/{project_scheduler_id}",
    response_model=WorkItemResponse,
    summary="Get one work item",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Work item not found"}},
)
async def get_work_item(
    project_scheduler_id: int,
    repository=Depends(get_work_item_repository),
) -> WorkItemResponse:
    work_item = await repository.get(project_scheduler_id)
    if work_item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Work item {project_scheduler_id} not found",
        )
    return WorkItemResponse.from_work_item(work_item)
