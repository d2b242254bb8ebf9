"""
Deployment Artifact Models

Schema artifacts deployed into every new project database. The kind is resolved
once from the file extension when the artifact is loaded.
"""

from pathlib import Path
from typing import Literal
from typing import Optional
from typing import Union

from loguru import logger
from pydantic import BaseModel

from tenantdb_api.workflow.enums import ArtifactKind

PACKAGE_EXTENSION = ".dacpac"
SCRIPT_EXTENSION = ".sql"


class PackageArtifact(BaseModel):
    """Declarative package applied by SqlPackage."""

    kind: Literal[ArtifactKind.PACKAGE] = ArtifactKind.PACKAGE
    path: Path
    role: str


class ScriptArtifact(BaseModel):
    """Imperative script executed batch by batch."""

    kind: Literal[ArtifactKind.SCRIPT] = ArtifactKind.SCRIPT
    path: Path
    role: str


class UnsupportedArtifact(BaseModel):
    """File with an unknown extension. Deploying it always fails."""

    kind: Literal[ArtifactKind.UNSUPPORTED] = ArtifactKind.UNSUPPORTED
    path: Path
    role: str


Artifact = Union[PackageArtifact, ScriptArtifact, UnsupportedArtifact]


def load_artifact(path: Optional[str], role: str) -> Optional[Artifact]:
    """
    Resolve a configured artifact path into a typed artifact.

    Args:
        path: Configured file path (may be empty)
        role: Configuration slot the path came from, used in error messages

    Returns:
        The artifact, or None when no path is configured or the file does not exist
    """
    if not path or not path.strip():
        logger.warning(f"No artifact configured for {role} - skipping")
        return None

    file_path = Path(path.strip())
    if not file_path.is_file():
        logger.warning(f"Artifact for {role} not found: {file_path} - skipping")
        return None

    suffix = file_path.suffix.lower()
    if suffix == PACKAGE_EXTENSION:
        return PackageArtifact(path=file_path, role=role)
    if suffix == SCRIPT_EXTENSION:
        return ScriptArtifact(path=file_path, role=role)

    logger.warning(f"Artifact for {role} has unsupported extension '{suffix}': {file_path}")
    return UnsupportedArtifact(path=file_path, role=role)
