"""
Workflow Orchestrator Module

Coordinates tenant database provisioning: database creation, artifact deployment
and status tracking.
"""

from tenantdb_api.workflow.orchestrator.artifact_deployer import ArtifactDeployer
from tenantdb_api.workflow.orchestrator.artifact_deployer import PackagePublisher
from tenantdb_api.workflow.orchestrator.batch_executor import RetryingBatchExecutor
from tenantdb_api.workflow.orchestrator.batch_executor import ScriptPreparer
from tenantdb_api.workflow.orchestrator.database_provisioner import DatabaseProvisioner
from tenantdb_api.workflow.orchestrator.deadline import Deadline
from tenantdb_api.workflow.orchestrator.factory import create_orchestrator
from tenantdb_api.workflow.orchestrator.provisioning import ProvisioningOrchestrator
from tenantdb_api.workflow.orchestrator.status_tracker import StatusTracker

__all__ = [
    "ArtifactDeployer",
    "PackagePublisher",
    "RetryingBatchExecutor",
    "ScriptPreparer",
    "DatabaseProvisioner",
    "Deadline",
    "create_orchestrator",
    "ProvisioningOrchestrator",
    "StatusTracker",
]
