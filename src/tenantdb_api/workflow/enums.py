"""
Workflow Enums

Enum types used throughout the provisioning workflow.
"""

from enum import Enum
from enum import IntEnum

# ════════════════════════════════════════════════════════════════════════════
# Status Enums
# ════════════════════════════════════════════════════════════════════════════


class ProjectStatus(IntEnum):
    """Project status seed rows shared with the upstream project registry."""

    NOT_INITIATED = 1
    IN_PROGRESS = 2
    FAILED = 3
    COMPLETED = 4


class ItemState(str, Enum):
    """Lifecycle of a work item inside one run. Only terminal states are persisted."""

    ELIGIBLE = "ELIGIBLE"
    PROVISIONING = "PROVISIONING"  # Ensuring the database exists
    DEPLOYING = "DEPLOYING"  # Applying artifacts
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# ════════════════════════════════════════════════════════════════════════════
# Artifact Enums
# ════════════════════════════════════════════════════════════════════════════


class ArtifactKind(str, Enum):
    """Deployment artifact discriminator, derived from the file extension."""

    PACKAGE = "PACKAGE"  # .dacpac, applied by a deployment engine
    SCRIPT = "SCRIPT"  # .sql, executed batch by batch
    UNSUPPORTED = "UNSUPPORTED"


class ArtifactRole(str, Enum):
    """Configuration slot an artifact was loaded from. Slots deploy in declaration order."""

    PACKAGE_PATH = "package_path"
    SCRIPT_PATH = "script_path"


class DeployOutcome(str, Enum):
    """Outcome of deploying one artifact slot."""

    SKIPPED = "SKIPPED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
