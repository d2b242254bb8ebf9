"""
Provisioning Scheduler

Background task that runs the provisioning orchestrator immediately and then on a fixed interval.
"""

import asyncio

from loguru import logger

from tenantdb_api.workflow.exceptions import RunInProgressError


async def start_provisioning_scheduler(orchestrator, interval_seconds: float = 30.0, max_runs: int = None):
    """
    Run the orchestrator in a loop until cancelled.

    Errors of a single run (including an unreadable work item source) are logged and
    the loop continues with the next tick.

    Args:
        orchestrator: ProvisioningOrchestrator instance
        interval_seconds: Delay between the end of one run and the start of the next
        max_runs: Stop after this many runs (None runs forever)
    """
    logger.info(f"Provisioning scheduler started (interval: {interval_seconds}s)")
    runs = 0

    while True:
        runs += 1
        try:
            summary = await orchestrator.run()
            if summary.processed:
                logger.info(
                    f"Scheduled run processed {summary.processed} item(s): "
                    f"{summary.succeeded} succeeded, {summary.failed} failed"
                )
        except asyncio.CancelledError:
            logger.info("Provisioning scheduler cancelled")
            raise
        except RunInProgressError:
            logger.debug("Previous provisioning run still active - skipping tick")
        except Exception as e:
            logger.opt(exception=e).error(f"Scheduled provisioning run failed: {e}")

        if max_runs is not None and runs >= max_runs:
            break
        await asyncio.sleep(interval_seconds)
