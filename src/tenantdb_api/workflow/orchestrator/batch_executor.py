"""
Retrying Batch Executor

Executes SQL scripts batch by batch over one connection and retries the whole
sequence on failure. Scripts must therefore be idempotent (IF NOT EXISTS style DDL).
"""

import time
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from loguru import logger

from tenantdb_api.workflow.exceptions import ItemTimeoutError
from tenantdb_api.workflow.exceptions import ScriptExecutionError
from tenantdb_api.workflow.orchestrator.deadline import Deadline
from tenantdb_api.workflow.sql.batch_splitter import DEFAULT_SEPARATOR
from tenantdb_api.workflow.sql.batch_splitter import split_batches
from tenantdb_api.workflow.sql.client import SqlClient
from tenantdb_api.workflow.sql.connection_string import SqlConnectionString


class ScriptPreparer:
    """
    Prepares the create-schema script for unattended execution.

    Replaces tokens before splitting, then drops every batch before the first one
    containing ``start_marker``. The head of the script holds login and permission
    bootstrapping meant for a manual run.
    """

    def __init__(self, substitutions: Optional[Dict[str, str]] = None, start_marker: Optional[str] = None):
        self.substitutions = substitutions or {}
        self.start_marker = start_marker

    def substitute(self, script: str) -> str:
        for token, value in self.substitutions.items():
            script = script.replace(token, value)
        return script

    def select(self, batches: List[str]) -> List[str]:
        if not self.start_marker:
            return batches
        marker = self.start_marker.lower()
        for index, batch in enumerate(batches):
            if marker in batch.lower():
                if index:
                    logger.debug(f"Skipping {index} batch(es) before '{self.start_marker}'")
                return batches[index:]
        logger.warning(f"Start marker '{self.start_marker}' not found in script - no batches executed")
        return []


class RetryingBatchExecutor:
    def __init__(
        self,
        sql_client: SqlClient,
        max_attempts: int = 3,
        retry_delay_seconds: float = 2.0,
        separator: str = DEFAULT_SEPARATOR,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.sql_client = sql_client
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.separator = separator
        self._sleep = sleep

    def prepare(self, script: str, preparer: Optional[ScriptPreparer] = None) -> List[str]:
        if preparer:
            script = preparer.substitute(script)
        batches = split_batches(script, self.separator)
        if preparer:
            batches = preparer.select(batches)
        return batches

    def execute(
        self,
        connection_string: SqlConnectionString,
        script: str,
        preparer: Optional[ScriptPreparer] = None,
        deadline: Optional[Deadline] = None,
    ) -> int:
        """
        Execute every batch of ``script``.

        Args:
            connection_string: Connection scoped to the target database
            script: Raw script text
            preparer: Optional token substitution and head skipping
            deadline: Time budget of the work item, checked before every batch and retry

        Returns:
            Number of batches executed

        Raises:
            ScriptExecutionError: The last attempt failed
            ItemTimeoutError: The deadline passed; never retried
        """
        batches = self.prepare(script, preparer)
        if not batches:
            return 0
        deadline = deadline or Deadline()

        last_error: Optional[Exception] = None
        failed_batch: Optional[int] = None
        for attempt in range(1, self.max_attempts + 1):
            deadline.check("script execution")
            batch_index = None
            try:
                with self.sql_client.connect(connection_string, query_timeout=deadline.query_timeout()) as conn:
                    for batch_index, batch in enumerate(batches):
                        deadline.check("script execution")
                        self.sql_client.execute(conn, batch)
                if attempt > 1:
                    logger.info(f"Script succeeded on attempt {attempt}/{self.max_attempts}")
                return len(batches)
            except ItemTimeoutError:
                raise
            except Exception as e:
                last_error = e
                failed_batch = batch_index
                logger.warning(
                    f"Script attempt {attempt}/{self.max_attempts} failed at batch {batch_index}: {e}"
                )
                deadline.check("script execution")
                if attempt < self.max_attempts and self.retry_delay_seconds > 0:
                    self._sleep(deadline.cap(self.retry_delay_seconds))

        raise ScriptExecutionError(
            f"Script failed after {self.max_attempts} attempt(s): {last_error}",
            attempts=self.max_attempts,
            batch_index=failed_batch,
        ) from last_error
