"""
SQL Server Client

Thin pyodbc wrapper. Every connection is opened in autocommit mode because
CREATE DATABASE cannot run inside a user transaction, and is closed on every exit path.
"""

from contextlib import contextmanager
from typing import Any
from typing import Iterator
from typing import Optional

import pyodbc

from tenantdb_api.workflow.sql.connection_string import SqlConnectionString


class SqlClient:
    def __init__(self, driver: str = "ODBC Driver 18 for SQL Server", login_timeout: int = 30):
        self.driver = driver
        self.login_timeout = login_timeout

    @contextmanager
    def connect(self, connection_string: SqlConnectionString, query_timeout: int = 0) -> Iterator[pyodbc.Connection]:
        """Open an autocommit connection; ``query_timeout`` (seconds, 0 = none) applies to every statement."""
        conn = pyodbc.connect(
            connection_string.to_odbc(self.driver),
            autocommit=True,
            timeout=self.login_timeout,
        )
        try:
            if query_timeout:
                conn.timeout = query_timeout
            yield conn
        finally:
            conn.close()

    def scalar(self, conn: pyodbc.Connection, sql: str, *params: Any) -> Optional[Any]:
        """Run a query and return the first column of the first row."""
        cursor = conn.cursor()
        try:
            row = cursor.execute(sql, *params).fetchone()
            return row[0] if row else None
        finally:
            cursor.close()

    def execute(self, conn: pyodbc.Connection, sql: str) -> None:
        """
        Execute one batch.

        Result sets are drained so that errors raised by later statements in the
        batch surface here instead of being silently dropped.
        """
        cursor = conn.cursor()
        try:
            cursor.execute(sql)
            while cursor.nextset():
                pass
        finally:
            cursor.close()
