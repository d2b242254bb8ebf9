"""
Run Result Models

Outcomes of single artifact deployments, single work items and whole runs.
"""

from datetime import datetime
from datetime import timezone
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import Field

from tenantdb_api.workflow.enums import DeployOutcome
from tenantdb_api.workflow.enums import ItemState


class DeployResult(BaseModel):
    """Result of deploying one artifact into one database."""

    outcome: DeployOutcome
    role: Optional[str] = None
    message: Optional[str] = None
    batches_executed: Optional[int] = None  # Script deployments only

    @property
    def success(self) -> bool:
        return self.outcome != DeployOutcome.FAILED

    @classmethod
    def skipped(cls, role: Optional[str] = None) -> "DeployResult":
        return cls(outcome=DeployOutcome.SKIPPED, role=role)

    @classmethod
    def succeeded(cls, role: str, batches_executed: Optional[int] = None) -> "DeployResult":
        return cls(outcome=DeployOutcome.SUCCEEDED, role=role, batches_executed=batches_executed)

    @classmethod
    def failed(cls, role: str, message: str) -> "DeployResult":
        return cls(outcome=DeployOutcome.FAILED, role=role, message=message)


class ItemOutcome(BaseModel):
    """Terminal result of one work item."""

    project_scheduler_id: int
    project_id: Optional[int] = None
    database_name: Optional[str] = None
    success: bool
    state: ItemState
    status_id: int
    error_message: Optional[str] = None
    duration_ms: Optional[int] = None
    deployments: List[DeployResult] = Field(default_factory=list)


class RunSummary(BaseModel):
    """Summary of one orchestration run."""

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    skipped: bool = False
    skip_reason: Optional[str] = None
    items: List[ItemOutcome] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if not item.success)

    def finish(self) -> "RunSummary":
        self.finished_at = datetime.now(timezone.utc)
        return self
