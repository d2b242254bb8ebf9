"""Background scheduling of provisioning runs."""

from tenantdb_api.workflow.scheduler.scheduler_loop import start_provisioning_scheduler

__all__ = ["start_provisioning_scheduler"]
