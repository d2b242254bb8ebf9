"""
Work Item Model

A queued request to provision the database of a newly created project.
"""

from datetime import datetime
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from tenantdb_api.workflow.enums import ProjectStatus


class WorkItem(BaseModel):
    """Project scheduler row (work item) database model."""

    project_scheduler_id: int
    project_id: Optional[int] = None
    project_name: str = ""
    database_name: str = ""  # Derived upstream from project_name (catalog variant)
    user_name: str = ""  # Only set for SQL authentication
    password: str = Field(default="", repr=False)
    connection_string: str = ""  # Connection template chosen upstream
    project_status_id: int
    error_message: str = ""
    is_active: bool = True
    modified_on: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def uses_integrated_security(self) -> bool:
        return not self.user_name

    def is_eligible(self, eligible_status: int) -> bool:
        return self.is_active and self.project_status_id == eligible_status


class StatusCodes(BaseModel):
    """Status codes written by the pipeline, injected from configuration."""

    eligible: int = 1
    completed: int = 4
    failed: int = 5

    def terminal(self, success: bool) -> int:
        return self.completed if success else self.failed

    def seed_mismatches(self) -> List[str]:
        """
        Compare the terminal codes with the upstream project status seed.

        The pipeline has historically written 5 for failures while the seed defines
        3 = Failed and has no row 5. The mismatch is reported, not corrected.
        """
        seed = {status.value: status.name for status in ProjectStatus}
        problems = []
        if seed.get(self.completed) != ProjectStatus.COMPLETED.name:
            problems.append(
                f"completed status {self.completed} is {seed.get(self.completed, 'not seeded')} "
                f"in the project status seed (expected {ProjectStatus.COMPLETED.value})"
            )
        if seed.get(self.failed) != ProjectStatus.FAILED.name:
            problems.append(
                f"failed status {self.failed} is {seed.get(self.failed, 'not seeded')} "
                f"in the project status seed (expected {ProjectStatus.FAILED.value})"
            )
        return problems
