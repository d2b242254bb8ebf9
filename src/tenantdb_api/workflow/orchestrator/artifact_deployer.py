"""
Artifact Deployer

Deploys one schema artifact into one project database. Packages are published with
SqlPackage, scripts are executed through the retrying batch executor.
"""

import subprocess
import zipfile
from pathlib import Path
from typing import List
from typing import Optional

from loguru import logger

from tenantdb_api.monitoring.logger import mask_connection_string
from tenantdb_api.workflow.enums import ArtifactRole
from tenantdb_api.workflow.exceptions import ArtifactDeploymentError
from tenantdb_api.workflow.exceptions import InvalidPackageError
from tenantdb_api.workflow.exceptions import ItemTimeoutError
from tenantdb_api.workflow.exceptions import PackageDeploymentError
from tenantdb_api.workflow.exceptions import UnsupportedArtifactError
from tenantdb_api.workflow.models.artifact import Artifact
from tenantdb_api.workflow.models.artifact import PackageArtifact
from tenantdb_api.workflow.models.artifact import ScriptArtifact
from tenantdb_api.workflow.models.results import DeployResult
from tenantdb_api.workflow.orchestrator.batch_executor import RetryingBatchExecutor
from tenantdb_api.workflow.orchestrator.batch_executor import ScriptPreparer
from tenantdb_api.workflow.orchestrator.database_provisioner import DatabaseProvisioner
from tenantdb_api.workflow.orchestrator.deadline import Deadline
from tenantdb_api.workflow.sql.connection_string import SqlConnectionString

OUTPUT_TAIL_LINES = 20


class PackagePublisher:
    """Publishes .dacpac packages with the SqlPackage command line."""

    def __init__(
        self,
        sqlpackage_path: str = "sqlpackage",
        timeout_seconds: Optional[float] = None,
        block_on_possible_data_loss: bool = False,
        create_new_database: bool = False,
    ):
        self.sqlpackage_path = sqlpackage_path
        self.timeout_seconds = timeout_seconds or None
        self.block_on_possible_data_loss = block_on_possible_data_loss
        self.create_new_database = create_new_database

    def build_command(self, package_path: Path, target_connection: SqlConnectionString) -> List[str]:
        return [
            self.sqlpackage_path,
            "/Action:Publish",
            f"/SourceFile:{package_path}",
            f"/TargetConnectionString:{target_connection}",
            f"/p:BlockOnPossibleDataLoss={str(self.block_on_possible_data_loss).lower()}",
            f"/p:CreateNewDatabase={str(self.create_new_database).lower()}",
        ]

    def publish(
        self,
        package_path: Path,
        target_connection: SqlConnectionString,
        deadline: Optional[Deadline] = None,
    ) -> None:
        """Run SqlPackage; its timeout is the configured one capped at the time left on ``deadline``."""
        # A .dacpac is an OPC zip container
        if not zipfile.is_zipfile(package_path):
            raise InvalidPackageError(f"{package_path} is not a valid .dacpac package")

        deadline = deadline or Deadline()
        deadline.check("package publish")
        timeout = deadline.cap(self.timeout_seconds)

        command = self.build_command(package_path, target_connection)
        logger.info(
            "Publishing package",
            package=str(package_path),
            target=mask_connection_string(str(target_connection)),
        )
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise PackageDeploymentError(f"SqlPackage executable not found: {self.sqlpackage_path}") from e
        except subprocess.TimeoutExpired as e:
            deadline.check("package publish")
            raise PackageDeploymentError(f"SqlPackage timed out after {timeout} seconds") from e

        if result.returncode != 0:
            output = (result.stderr or result.stdout or "").strip().splitlines()
            tail = mask_connection_string("\n".join(output[-OUTPUT_TAIL_LINES:]))
            raise PackageDeploymentError(f"SqlPackage exited with code {result.returncode}: {tail}")


class ArtifactDeployer:
    """
    Dispatches an artifact to the deployment path for its kind.

    Failures come back as a failed DeployResult carrying
    ``Deployment from {role} failed: {cause}`` rather than as exceptions.
    ItemTimeoutError is the exception: it ends the whole item and propagates.
    """

    def __init__(
        self,
        provisioner: DatabaseProvisioner,
        executor: RetryingBatchExecutor,
        publisher: PackagePublisher,
        database_token: str = "$(DatabaseName)",
        start_marker: Optional[str] = "USE [master]",
    ):
        self.provisioner = provisioner
        self.executor = executor
        self.publisher = publisher
        self.database_token = database_token
        self.start_marker = start_marker

    def deploy(
        self,
        artifact: Optional[Artifact],
        database_name: str,
        server_connection: SqlConnectionString,
        deadline: Optional[Deadline] = None,
    ) -> DeployResult:
        if artifact is None:
            return DeployResult.skipped()
        deadline = deadline or Deadline()

        try:
            if isinstance(artifact, PackageArtifact):
                self._deploy_package(artifact, database_name, server_connection, deadline)
                return DeployResult.succeeded(artifact.role)
            if isinstance(artifact, ScriptArtifact):
                executed = self._deploy_script(artifact, database_name, server_connection, deadline)
                return DeployResult.succeeded(artifact.role, batches_executed=executed)
            raise UnsupportedArtifactError(
                f"File {artifact.path} from {artifact.role} is neither a .dacpac nor .sql file. "
                "Unsupported file type."
            )
        except ItemTimeoutError:
            raise
        except Exception as e:
            error = ArtifactDeploymentError(artifact.role, e)
            logger.error(f"{error}")
            return DeployResult.failed(artifact.role, str(error))

    def _deploy_package(
        self,
        artifact: PackageArtifact,
        database_name: str,
        server_connection: SqlConnectionString,
        deadline: Deadline,
    ) -> None:
        self.publisher.publish(artifact.path, server_connection.with_database(database_name), deadline=deadline)
        logger.success(f"Package {artifact.path.name} deployed to {database_name}")

    def _deploy_script(
        self,
        artifact: ScriptArtifact,
        database_name: str,
        server_connection: SqlConnectionString,
        deadline: Deadline,
    ) -> int:
        # Deployment order across slots is not guaranteed
        self.provisioner.ensure_exists(server_connection, database_name, deadline=deadline)

        script = artifact.path.read_text(encoding="utf-8-sig")
        preparer = self._preparer_for(artifact, database_name)

        executed = self.executor.execute(
            server_connection.with_database(database_name), script, preparer, deadline=deadline
        )
        logger.success(f"Script {artifact.path.name} executed {executed} batch(es) on {database_name}")
        return executed

    def _preparer_for(self, artifact: ScriptArtifact, database_name: str) -> Optional[ScriptPreparer]:
        # Only the create-schema script carries the database token and the manual-run head
        if artifact.role != ArtifactRole.SCRIPT_PATH.value:
            return None
        return ScriptPreparer(
            substitutions={self.database_token: database_name.replace(" ", "")},
            start_marker=self.start_marker,
        )
