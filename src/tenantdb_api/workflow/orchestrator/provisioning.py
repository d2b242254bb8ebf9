"""
Provisioning Orchestrator

Drives eligible work items through database creation and artifact deployment,
one item at a time, and always records a terminal status.
"""

import asyncio
import time
from typing import List
from typing import Optional
from typing import Tuple

from loguru import logger

from tenantdb_api.monitoring.logger import mask_connection_string
from tenantdb_api.workflow.enums import ArtifactRole
from tenantdb_api.workflow.enums import ItemState
from tenantdb_api.workflow.exceptions import ItemTimeoutError
from tenantdb_api.workflow.exceptions import RunInProgressError
from tenantdb_api.workflow.exceptions import WorkItemSourceError
from tenantdb_api.workflow.models.artifact import Artifact
from tenantdb_api.workflow.models.artifact import load_artifact
from tenantdb_api.workflow.models.config import ProvisioningConfig
from tenantdb_api.workflow.models.results import DeployResult
from tenantdb_api.workflow.models.results import ItemOutcome
from tenantdb_api.workflow.models.results import RunSummary
from tenantdb_api.workflow.models.work_item import WorkItem
from tenantdb_api.workflow.orchestrator.artifact_deployer import ArtifactDeployer
from tenantdb_api.workflow.orchestrator.database_provisioner import DatabaseProvisioner
from tenantdb_api.workflow.orchestrator.deadline import Deadline
from tenantdb_api.workflow.orchestrator.status_tracker import StatusTracker
from tenantdb_api.workflow.sql.connection_string import SqlConnectionString
from tenantdb_api.workflow.sql.identifiers import IdentifierSanitizer

# Deployment order: package before script
ARTIFACT_SLOTS = (ArtifactRole.PACKAGE_PATH, ArtifactRole.SCRIPT_PATH)


class ProvisioningOrchestrator:
    """
    Provisioning run coordinator.

    Flow per work item:
        ELIGIBLE -> PROVISIONING (sanitize name, ensure database) -> DEPLOYING (artifact slots)
        -> COMPLETED | FAILED

    A failure of one item never stops the others. Failing to read the work item
    source is fatal for the run. Only one run executes at a time.
    """

    def __init__(
        self,
        config: ProvisioningConfig,
        work_items_repo,
        status_tracker: StatusTracker,
        provisioner: DatabaseProvisioner,
        deployer: ArtifactDeployer,
        catalog_sanitizer: Optional[IdentifierSanitizer] = None,
        database_sanitizer: Optional[IdentifierSanitizer] = None,
    ):
        self.config = config
        self.work_items_repo = work_items_repo
        self.status_tracker = status_tracker
        self.provisioner = provisioner
        self.deployer = deployer
        self.catalog_sanitizer = catalog_sanitizer or IdentifierSanitizer.catalog()
        self.database_sanitizer = database_sanitizer or IdentifierSanitizer.database()
        self._lock = asyncio.Lock()

        for problem in config.status_codes.seed_mismatches():
            logger.warning(f"Status code mismatch: {problem}")

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run(self) -> RunSummary:
        """
        Process every eligible work item once.

        Raises:
            RunInProgressError: Another run is active
            WorkItemSourceError: The eligible work items could not be read
        """
        if self._lock.locked():
            raise RunInProgressError("A provisioning run is already in progress")

        async with self._lock:
            return await self._run()

    async def _run(self) -> RunSummary:
        summary = RunSummary()

        if not self.config.admin_connection_string or not self.config.admin_connection_string.strip():
            logger.warning("No admin connection string configured - skipping provisioning run")
            summary.skipped = True
            summary.skip_reason = "admin connection string not configured"
            return summary.finish()

        server_connection = SqlConnectionString(self.config.admin_connection_string)
        logger.debug("Using server connection", connection=mask_connection_string(str(server_connection)))
        logger.debug(
            "Project connection templates",
            integrated_template_set=bool(self.config.integrated_connection_template),
            sql_auth_template_set=bool(self.config.sql_auth_connection_template),
        )

        artifacts = self._load_artifacts()

        work_items = await self._list_eligible()
        logger.info(f"Provisioning run started: {len(work_items)} eligible work item(s)")

        for work_item in work_items:
            outcome = await self.process_item(work_item, server_connection, artifacts)
            summary.items.append(outcome)

        summary.finish()
        logger.info(
            "Provisioning run finished",
            processed=summary.processed,
            succeeded=summary.succeeded,
            failed=summary.failed,
        )
        return summary

    def _load_artifacts(self) -> List[Tuple[ArtifactRole, Optional[Artifact]]]:
        paths = {
            ArtifactRole.PACKAGE_PATH: self.config.package_path,
            ArtifactRole.SCRIPT_PATH: self.config.script_path,
        }
        return [(role, load_artifact(paths[role], role.value)) for role in ARTIFACT_SLOTS]

    async def _list_eligible(self) -> List[WorkItem]:
        eligible_status = self.config.status_codes.eligible
        try:
            rows = await self.work_items_repo.list_eligible(eligible_status)
        except Exception as e:
            logger.opt(exception=e).error(f"Failed to read eligible work items: {e}")
            raise WorkItemSourceError(f"Failed to read eligible work items: {e}") from e

        items = [row if isinstance(row, WorkItem) else WorkItem.model_validate(row) for row in rows]
        # The source is trusted to filter, the entry condition is still enforced here
        return [item for item in items if item.is_eligible(eligible_status)]

    def derive_database_name(self, work_item: WorkItem) -> str:
        if work_item.database_name and work_item.database_name.strip():
            candidate = work_item.database_name
        elif work_item.project_name and work_item.project_name.strip():
            candidate = self.catalog_sanitizer.sanitize(work_item.project_name)
        else:
            candidate = f"Project_{work_item.project_scheduler_id}"
        return self.database_sanitizer.sanitize(candidate)

    async def process_item(
        self,
        work_item: WorkItem,
        server_connection: SqlConnectionString,
        artifacts: List[Tuple[ArtifactRole, Optional[Artifact]]],
    ) -> ItemOutcome:
        """
        Provision one work item. Never raises; the outcome is recorded exactly once.

        The blocking work runs in a worker thread that enforces the item deadline itself,
        and the status is recorded only after that thread has returned.
        """
        item_id = work_item.project_scheduler_id
        success = False
        error_message: Optional[str] = None
        database_name: Optional[str] = None
        deployments: List[DeployResult] = []
        started = time.perf_counter()

        try:
            database_name = self.derive_database_name(work_item)
            logger.info(
                "Provisioning work item",
                scheduler_id=item_id,
                project_name=work_item.project_name,
                database=database_name,
            )

            deadline = Deadline(self.config.item_timeout_seconds)
            await asyncio.to_thread(
                self._provision, work_item, database_name, server_connection, artifacts, deployments, deadline
            )

            failures = [result for result in deployments if not result.success]
            if failures:
                error_message = failures[0].message
            else:
                success = True
        except ItemTimeoutError as e:
            error_message = str(e)
            logger.error(f"[{item_id}] {error_message} (during {e.step})")
        except Exception as e:
            logger.opt(exception=e).error(f"[{item_id}] Provisioning failed: {e}")
            error_message = str(e) or type(e).__name__
        finally:
            status_id = await self.status_tracker.record_outcome(work_item, success, error_message)

        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.debug("Work item finished", scheduler_id=item_id, success=success, duration_ms=duration_ms)
        return ItemOutcome(
            project_scheduler_id=item_id,
            project_id=work_item.project_id,
            database_name=database_name,
            success=success,
            state=ItemState.COMPLETED if success else ItemState.FAILED,
            duration_ms=duration_ms,
            status_id=status_id,
            error_message=None if success else error_message,
            deployments=list(deployments),
        )

    def _provision(
        self,
        work_item: WorkItem,
        database_name: str,
        server_connection: SqlConnectionString,
        artifacts: List[Tuple[ArtifactRole, Optional[Artifact]]],
        deployments: List[DeployResult],
        deadline: Deadline,
    ) -> None:
        item_id = work_item.project_scheduler_id

        logger.debug(f"[{item_id}] {ItemState.PROVISIONING.value}")
        self.provisioner.ensure_exists(server_connection, database_name, deadline=deadline)

        logger.debug(f"[{item_id}] {ItemState.DEPLOYING.value}")
        for role, artifact in artifacts:
            deadline.check(role.value)
            result = self.deployer.deploy(artifact, database_name, server_connection, deadline=deadline)
            if result.role is None:
                result.role = role.value
            deployments.append(result)
            if not result.success:
                break
