"""
Orchestrator Factory

Wires the provisioning components from Settings.
"""

from tenantdb_api.settings import Settings
from tenantdb_api.workflow.db.repository_project import ProjectRepository
from tenantdb_api.workflow.db.repository_work_item import WorkItemRepository
from tenantdb_api.workflow.models.config import ProvisioningConfig
from tenantdb_api.workflow.orchestrator.artifact_deployer import ArtifactDeployer
from tenantdb_api.workflow.orchestrator.artifact_deployer import PackagePublisher
from tenantdb_api.workflow.orchestrator.batch_executor import RetryingBatchExecutor
from tenantdb_api.workflow.orchestrator.database_provisioner import DatabaseProvisioner
from tenantdb_api.workflow.orchestrator.provisioning import ProvisioningOrchestrator
from tenantdb_api.workflow.orchestrator.status_tracker import StatusTracker
from tenantdb_api.workflow.sql.client import SqlClient
from tenantdb_api.workflow.sql.identifiers import IdentifierSanitizer


def create_orchestrator(settings: Settings, pool, sql_client: SqlClient = None) -> ProvisioningOrchestrator:
    """
    Build a ProvisioningOrchestrator backed by the control database.

    Args:
        settings: Application settings
        pool: ControlDBPool (or anything with an async ``acquire()``)
        sql_client: Override for the SQL Server client
    """
    config = ProvisioningConfig.from_settings(settings)
    sql_client = sql_client or SqlClient(settings.odbc_driver, settings.sql_login_timeout_seconds)

    provisioner = DatabaseProvisioner(sql_client, settle_seconds=settings.database_settle_seconds)
    executor = RetryingBatchExecutor(
        sql_client,
        max_attempts=settings.script_max_attempts,
        retry_delay_seconds=settings.script_retry_delay_seconds,
        separator=settings.batch_separator,
    )
    publisher = PackagePublisher(
        sqlpackage_path=settings.sqlpackage_path,
        timeout_seconds=settings.package_timeout_seconds,
        block_on_possible_data_loss=settings.package_block_on_possible_data_loss,
        create_new_database=settings.package_create_new_database,
    )
    deployer = ArtifactDeployer(
        provisioner,
        executor,
        publisher,
        database_token=settings.script_database_token,
        start_marker=settings.script_start_marker,
    )

    sanitizer_options = dict(
        fallback=settings.identifier_fallback,
        digit_prefix=settings.identifier_digit_prefix,
        invalid_pattern=settings.identifier_invalid_pattern,
    )
    work_items_repo = WorkItemRepository(pool)
    tracker = StatusTracker(work_items_repo, ProjectRepository(pool), config.status_codes)

    return ProvisioningOrchestrator(
        config,
        work_items_repo,
        tracker,
        provisioner,
        deployer,
        catalog_sanitizer=IdentifierSanitizer(settings.catalog_name_max_length, **sanitizer_options),
        database_sanitizer=IdentifierSanitizer(settings.database_name_max_length, **sanitizer_options),
    )
