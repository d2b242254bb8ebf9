"""
Provisioning Exceptions

Errors raised by the provisioning workflow. Messages end up in the work item's
error_message column, so they are written for operators.
"""

from typing import Optional


class ProvisioningError(Exception):
    """Base class for provisioning failures."""


class InvalidIdentifierError(ProvisioningError, ValueError):
    """A database name is not a sanitized identifier and cannot be used in DDL."""


class DatabaseProvisioningError(ProvisioningError):
    """The target database could not be looked up or created."""


class ScriptExecutionError(ProvisioningError):
    """A SQL script still failed after every retry attempt."""

    def __init__(self, message: str, attempts: int, batch_index: Optional[int] = None):
        super().__init__(message)
        self.attempts = attempts
        self.batch_index = batch_index


class InvalidPackageError(ProvisioningError):
    """A declarative package file cannot be loaded."""


class PackageDeploymentError(ProvisioningError):
    """Publishing a declarative package failed."""


class UnsupportedArtifactError(ProvisioningError):
    """An artifact is neither a .dacpac nor a .sql file."""


class ArtifactDeploymentError(ProvisioningError):
    """Deployment of one artifact slot failed. Wraps the cause with the slot's role."""

    def __init__(self, role: str, cause: Exception):
        super().__init__(f"Deployment from {role} failed: {cause}")
        self.role = role
        self.cause = cause


class WorkItemSourceError(ProvisioningError):
    """The eligible work items could not be read. Fatal for the whole run."""


class RunInProgressError(ProvisioningError):
    """A provisioning run was requested while another one is still running."""


class ItemTimeoutError(ProvisioningError):
    """A work item ran past its time budget. Raised inside the worker, never retried."""

    def __init__(self, seconds: Optional[float], step: Optional[str] = None):
        super().__init__(f"Provisioning timed out after {seconds} seconds")
        self.seconds = seconds
        self.step = step
