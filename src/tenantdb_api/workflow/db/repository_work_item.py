"""
Work Item Repository

Queries and status writes for provisioning work items (project schedulers).
"""

from typing import List
from typing import Optional

from tenantdb_api.workflow.db.pool import SCHEMA_NAME
from tenantdb_api.workflow.models.work_item import WorkItem

_COLUMNS = """
    project_scheduler_id, project_id, project_name, database_name, user_name, password,
    connection_string, project_status_id, error_message, is_active, modified_on
"""


class WorkItemRepository:
    """Work item repository. Accepts a ControlDBPool or a raw asyncpg pool."""

    def __init__(self, pool):
        self.pool = pool
        self.table = f"{SCHEMA_NAME}.project_schedulers"

    async def list_eligible(self, eligible_status: int) -> List[WorkItem]:
        """Active work items in the eligible status, oldest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_COLUMNS} FROM {self.table}
                WHERE is_active = true AND project_status_id = $1
                ORDER BY project_scheduler_id
                """,
                eligible_status,
            )
        return [WorkItem.model_validate(dict(row)) for row in rows]

    async def list_by_status(self, status_id: Optional[int] = None, limit: int = 100) -> List[WorkItem]:
        async with self.pool.acquire() as conn:
            if status_id is None:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM {self.table} ORDER BY project_scheduler_id DESC LIMIT $1",
                    limit,
                )
            else:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS} FROM {self.table}
                    WHERE project_status_id = $1
                    ORDER BY project_scheduler_id DESC LIMIT $2
                    """,
                    status_id,
                    limit,
                )
        return [WorkItem.model_validate(dict(row)) for row in rows]

    async def get(self, project_scheduler_id: int) -> Optional[WorkItem]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM {self.table} WHERE project_scheduler_id = $1",
                project_scheduler_id,
            )
        return WorkItem.model_validate(dict(row)) if row else None

    async def update_status(self, project_scheduler_id: int, status_id: int, error_message: Optional[str]) -> bool:
        """
        Write a terminal status. The error text is cleared when ``error_message`` is None.

        Returns:
            True if the work item exists
        """
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                f"""
                UPDATE {self.table}
                SET project_status_id = $2, error_message = $3, modified_on = NOW()
                WHERE project_scheduler_id = $1
                """,
                project_scheduler_id,
                status_id,
                error_message or "",
            )
        return _rows_affected(result) > 0


def _rows_affected(command_tag: str) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 1"
    try:
        return int(command_tag.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0
