"""Data models for the provisioning workflow."""

from tenantdb_api.workflow.models.artifact import Artifact
from tenantdb_api.workflow.models.artifact import PackageArtifact
from tenantdb_api.workflow.models.artifact import ScriptArtifact
from tenantdb_api.workflow.models.artifact import UnsupportedArtifact
from tenantdb_api.workflow.models.artifact import load_artifact
from tenantdb_api.workflow.models.config import ProvisioningConfig
from tenantdb_api.workflow.models.results import DeployResult
from tenantdb_api.workflow.models.results import ItemOutcome
from tenantdb_api.workflow.models.results import RunSummary
from tenantdb_api.workflow.models.work_item import StatusCodes
from tenantdb_api.workflow.models.work_item import WorkItem

__all__ = [
    "Artifact",
    "PackageArtifact",
    "ScriptArtifact",
    "UnsupportedArtifact",
    "load_artifact",
    "ProvisioningConfig",
    "DeployResult",
    "ItemOutcome",
    "RunSummary",
    "StatusCodes",
    "WorkItem",
]
