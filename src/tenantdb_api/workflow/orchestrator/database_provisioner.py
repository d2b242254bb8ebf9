"""
Database Provisioner

Idempotently ensures a database exists on the shared SQL Server.
"""

import time
from typing import Callable
from typing import Optional

from loguru import logger

from tenantdb_api.workflow.exceptions import DatabaseProvisioningError
from tenantdb_api.workflow.exceptions import InvalidIdentifierError
from tenantdb_api.workflow.orchestrator.deadline import Deadline
from tenantdb_api.workflow.sql.client import SqlClient
from tenantdb_api.workflow.sql.connection_string import SqlConnectionString
from tenantdb_api.workflow.sql.identifiers import quote_identifier
from tenantdb_api.workflow.sql.identifiers import validate_identifier

ADMIN_CATALOG = "master"


class DatabaseProvisioner:
    """
    Creates project databases.

    Connects to the administrative catalog (the target database may not exist yet),
    looks the name up with DB_ID and issues CREATE DATABASE only when it is absent.
    After a create, waits ``settle_seconds`` so connections opened right after do not
    race the server's catalog propagation.
    """

    def __init__(self, sql_client: SqlClient, settle_seconds: float = 2.0, sleep: Callable[[float], None] = time.sleep):
        self.sql_client = sql_client
        self.settle_seconds = settle_seconds
        self._sleep = sleep

    def ensure_exists(
        self,
        server_connection: SqlConnectionString,
        database_name: str,
        deadline: Optional[Deadline] = None,
    ) -> bool:
        """
        Ensure ``database_name`` exists.

        Args:
            server_connection: Connection to the target server (any catalog)
            database_name: Sanitized database name
            deadline: Time budget of the work item; bounds the queries and the settle delay

        Returns:
            True if the database was created, False if it already existed
        """
        try:
            validate_identifier(database_name)
        except InvalidIdentifierError as e:
            raise DatabaseProvisioningError(str(e)) from e

        deadline = deadline or Deadline()
        deadline.check("database provisioning")

        admin_connection = server_connection.with_database(ADMIN_CATALOG)
        try:
            with self.sql_client.connect(admin_connection, query_timeout=deadline.query_timeout()) as conn:
                database_id = self.sql_client.scalar(conn, "SELECT DB_ID(?)", database_name)
                if database_id is not None:
                    logger.debug("Database already exists", database=database_name, database_id=database_id)
                    return False

                logger.info("Creating database", database=database_name)
                self.sql_client.execute(conn, f"CREATE DATABASE {quote_identifier(database_name)}")
        except DatabaseProvisioningError:
            raise
        except Exception as e:
            deadline.check("database provisioning")
            raise DatabaseProvisioningError(f"Failed to ensure database {database_name} exists: {e}") from e

        if self.settle_seconds > 0:
            self._sleep(deadline.cap(self.settle_seconds))
        logger.success(f"Database {database_name} created")
        return True
