"""Control database access."""

from tenantdb_api.workflow.db.pool import ControlDBPool
from tenantdb_api.workflow.db.repository_project import ProjectRepository
from tenantdb_api.workflow.db.repository_work_item import WorkItemRepository

__all__ = ["ControlDBPool", "ProjectRepository", "WorkItemRepository"]
