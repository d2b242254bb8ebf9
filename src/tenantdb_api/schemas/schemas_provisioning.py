"""Response schemas for the provisioning endpoints."""

from datetime import datetime
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import Field

from tenantdb_api.workflow.models.results import ItemOutcome
from tenantdb_api.workflow.models.results import RunSummary
from tenantdb_api.workflow.models.work_item import WorkItem


class WorkItemResponse(BaseModel):
    """Work item as exposed over HTTP. Credentials are never returned."""

    project_scheduler_id: int
    project_id: Optional[int] = None
    project_name: str
    database_name: str
    user_name: str = ""
    uses_integrated_security: bool
    project_status_id: int
    error_message: str = ""
    is_active: bool
    modified_on: Optional[datetime] = None

    @classmethod
    def from_work_item(cls, work_item: WorkItem) -> "WorkItemResponse":
        return cls(
            project_scheduler_id=work_item.project_scheduler_id,
            project_id=work_item.project_id,
            project_name=work_item.project_name,
            database_name=work_item.database_name,
            user_name=work_item.user_name,
            uses_integrated_security=work_item.uses_integrated_security,
            project_status_id=work_item.project_status_id,
            error_message=work_item.error_message,
            is_active=work_item.is_active,
            modified_on=work_item.modified_on,
        )


class RunSummaryResponse(BaseModel):
    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: bool
    skip_reason: Optional[str] = None
    processed: int = Field(description="Eligible work items attempted in this run")
    succeeded: int
    failed: int
    items: List[ItemOutcome]

    @classmethod
    def from_summary(cls, summary: RunSummary) -> "RunSummaryResponse":
        return cls(
            started_at=summary.started_at,
            finished_at=summary.finished_at,
            skipped=summary.skipped,
            skip_reason=summary.skip_reason,
            processed=summary.processed,
            succeeded=summary.succeeded,
            failed=summary.failed,
            items=summary.items,
        )
