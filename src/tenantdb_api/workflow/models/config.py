"""
Provisioning Configuration

Runtime configuration handed to the orchestrator, built from Settings once per process.
"""

from typing import Optional

from pydantic import BaseModel

from tenantdb_api.settings import Settings
from tenantdb_api.workflow.models.work_item import StatusCodes


class ProvisioningConfig(BaseModel):
    admin_connection_string: Optional[str] = None
    package_path: Optional[str] = None
    script_path: Optional[str] = None
    # Project connection templates chosen upstream per work item; reported, not consumed
    integrated_connection_template: Optional[str] = None
    sql_auth_connection_template: Optional[str] = None
    item_timeout_seconds: Optional[float] = None
    status_codes: StatusCodes = StatusCodes()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProvisioningConfig":
        return cls(
            admin_connection_string=settings.admin_connection_string,
            package_path=settings.package_path,
            script_path=settings.script_path,
            integrated_connection_template=settings.integrated_connection_template,
            sql_auth_connection_template=settings.sql_auth_connection_template,
            item_timeout_seconds=settings.item_timeout_seconds or None,
            status_codes=StatusCodes(
                eligible=settings.status_eligible,
                completed=settings.status_completed,
                failed=settings.status_failed,
            ),
        )
