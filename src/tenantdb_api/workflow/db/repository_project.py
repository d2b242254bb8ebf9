"""
Project Repository

Status mirror for project records owned by the upstream project registry.
"""

from typing import Any
from typing import Dict
from typing import Optional

from tenantdb_api.workflow.db.pool import SCHEMA_NAME
from tenantdb_api.workflow.db.repository_work_item import _rows_affected


class ProjectRepository:
    def __init__(self, pool):
        self.pool = pool
        self.table = f"{SCHEMA_NAME}.client_projects"

    async def get(self, project_id: int) -> Optional[Dict[str, Any]]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(f"SELECT * FROM {self.table} WHERE project_id = $1", project_id)
        return dict(row) if row else None

    async def update_status(self, project_id: int, status_id: int) -> bool:
        """Set the project status and touch modified_on. Returns False if the project does not exist."""
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                f"""
                UPDATE {self.table}
                SET project_status_id = $2, modified_on = NOW()
                WHERE project_id = $1
                """,
                project_id,
                status_id,
            )
        return _rows_affected(result) > 0
