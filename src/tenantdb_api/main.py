import asyncio
from textwrap import dedent

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from loguru import logger

from tenantdb_api.errors import handle_broad_exceptions
from tenantdb_api.errors import handle_pydantic_validation_errors
from tenantdb_api.errors import handle_run_in_progress
from tenantdb_api.errors import handle_work_item_source_error
from tenantdb_api.monitoring.logger import configure_logger
from tenantdb_api.monitoring.logger import mask_connection_string
from tenantdb_api.routes.routes_health import ROUTER_HEALTH
from tenantdb_api.routes.routes_provisioning import ROUTER_PROVISIONING
from tenantdb_api.settings import Settings
from tenantdb_api.workflow import __version__
from tenantdb_api.workflow.exceptions import RunInProgressError
from tenantdb_api.workflow.exceptions import WorkItemSourceError


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application.

    Configuration is loaded directly from environment variables via pydantic-settings.
    The provisioning workflow is wired only when a control database is configured.
    """
    settings = settings or Settings()

    configure_logger(log_level=settings.log_level)

    logger.info(
        "Configuration loaded successfully",
        admin_connection_set=bool(settings.admin_connection_string),
        admin_connection=mask_connection_string(settings.admin_connection_string or ""),
        package_path=settings.package_path,
        script_path=settings.script_path,
        integrated_template_set=bool(settings.integrated_connection_template),
        sql_auth_template_set=bool(settings.sql_auth_connection_template),
        scheduler_enabled=settings.enable_scheduler,
    )

    app = FastAPI(
        title="Tenant Database Provisioning API",
        version=__version__,
        description=dedent(
            """
        Provisions one SQL Server database per newly registered project and deploys
        the project schema into it.
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = settings
    app.state.orchestrator = None

    app.include_router(ROUTER_HEALTH)

    if settings.control_db_connection_string:
        logger.info("Initializing provisioning workflow")

        from tenantdb_api.workflow.db.pool import ControlDBPool
        from tenantdb_api.workflow.db.repository_work_item import WorkItemRepository
        from tenantdb_api.workflow.orchestrator.factory import create_orchestrator

        control_db_pool = ControlDBPool(settings.control_db_connection_string)
        app.state.control_db_pool = control_db_pool
        app.state.work_item_repository = WorkItemRepository(control_db_pool)
        app.state.orchestrator = create_orchestrator(settings, control_db_pool)

        @app.on_event("startup")
        async def startup_workflow():
            """Initialize the control database and start the scheduler."""
            await app.state.control_db_pool.initialize()
            logger.success("Control database initialized")

            if settings.enable_scheduler:
                from tenantdb_api.workflow.scheduler.scheduler_loop import start_provisioning_scheduler

                app.state.scheduler_task = asyncio.create_task(
                    start_provisioning_scheduler(app.state.orchestrator, settings.scheduler_interval_seconds)
                )
                logger.success("Provisioning scheduler started")

        @app.on_event("shutdown")
        async def shutdown_workflow():
            """Stop the scheduler and close the control database pool."""
            task = getattr(app.state, "scheduler_task", None)
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                logger.info("Provisioning scheduler stopped")
            await app.state.control_db_pool.close()
            logger.info("Control database closed")

    else:
        logger.info("Provisioning workflow disabled (control_db_connection_string not set)")

    app.include_router(ROUTER_PROVISIONING, prefix="/api")

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RunInProgressError,
        handler=handle_run_in_progress,
    )
    app.add_exception_handler(
        exc_class_or_status_code=WorkItemSourceError,
        handler=handle_work_item_source_error,
    )

    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name
