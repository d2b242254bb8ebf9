"""
Status Tracker

Writes the terminal status of a work item and mirrors it onto the project record.
"""

from typing import Optional

from loguru import logger

from tenantdb_api.workflow.models.work_item import StatusCodes
from tenantdb_api.workflow.models.work_item import WorkItem


class StatusTracker:
    """
    Helper for recording provisioning outcomes.

    Wraps repository calls. The work item write and the project write are
    independent and best-effort: a failure of one is logged and never hides the other.
    """

    def __init__(self, work_items_repo, projects_repo, status_codes: StatusCodes):
        """
        Initialize status tracker.

        Args:
            work_items_repo: Repository exposing update_status(project_scheduler_id, status_id, error_message)
            projects_repo: Repository exposing update_status(project_id, status_id)
            status_codes: Terminal codes to write
        """
        self.work_items_repo = work_items_repo
        self.projects_repo = projects_repo
        self.status_codes = status_codes

    async def record_outcome(self, work_item: WorkItem, success: bool, error_message: Optional[str] = None) -> int:
        """
        Record the terminal outcome of one work item.

        Args:
            work_item: The processed work item
            success: Whether provisioning succeeded
            error_message: Failure text, ignored on success

        Returns:
            The status code written
        """
        status_id = self.status_codes.terminal(success)
        error_text = None if success else (error_message or "Provisioning failed")
        item_id = work_item.project_scheduler_id

        try:
            updated = await self.work_items_repo.update_status(item_id, status_id, error_text)
            if updated:
                work_item.project_status_id = status_id
                work_item.error_message = error_text or ""
            else:
                logger.warning(f"[{item_id}] Work item not found - status {status_id} not recorded")
        except Exception as e:
            logger.opt(exception=e).error(f"[{item_id}] Failed to record work item status {status_id}: {e}")

        if work_item.project_id and work_item.project_id > 0:
            try:
                updated = await self.projects_repo.update_status(work_item.project_id, status_id)
                if not updated:
                    logger.warning(f"[{item_id}] Project {work_item.project_id} not found - status not mirrored")
            except Exception as e:
                logger.opt(exception=e).error(
                    f"[{item_id}] Failed to mirror status {status_id} to project {work_item.project_id}: {e}"
                )

        if success:
            logger.success(f"[{item_id}] Provisioning COMPLETED")
        else:
            logger.error(f"[{item_id}] Provisioning FAILED: {error_text}")
        return status_id
