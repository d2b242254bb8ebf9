"""Tests for the pyodbc client seam."""

from unittest.mock import MagicMock
from unittest.mock import patch

import pyodbc
import pytest

from tenantdb_api.workflow.sql.client import SqlClient

PYODBC_CONNECT = "tenantdb_api.workflow.sql.client.pyodbc.connect"


@pytest.fixture
def mock_conn():
    conn = MagicMock()
    conn.cursor.return_value = MagicMock()
    return conn


@pytest.fixture
def mock_cursor(mock_conn):
    return mock_conn.cursor.return_value


class TestConnect:
    """Tests for SqlClient.connect."""

    def test_opens_autocommit_connection(self, mock_conn, server_connection):
        client = SqlClient(driver="ODBC Driver 18 for SQL Server", login_timeout=15)
        target = server_connection.with_database("Acme")

        with patch(PYODBC_CONNECT, return_value=mock_conn) as mock_connect:
            with client.connect(target) as conn:
                assert conn is mock_conn

        odbc_string = mock_connect.call_args.args[0]
        assert odbc_string == target.to_odbc("ODBC Driver 18 for SQL Server")
        assert "DATABASE=Acme" in odbc_string
        assert mock_connect.call_args.kwargs == {"autocommit": True, "timeout": 15}
        mock_conn.close.assert_called_once()

    def test_query_timeout_applied(self, mock_conn, server_connection):
        with patch(PYODBC_CONNECT, return_value=mock_conn):
            with SqlClient().connect(server_connection, query_timeout=42):
                pass

        assert mock_conn.timeout == 42

    def test_no_query_timeout_by_default(self, server_connection):
        conn = MagicMock(spec=["cursor", "close"])

        with patch(PYODBC_CONNECT, return_value=conn):
            with SqlClient().connect(server_connection):
                pass

        assert not hasattr(conn, "timeout")

    def test_closed_when_body_raises(self, mock_conn, server_connection):
        with patch(PYODBC_CONNECT, return_value=mock_conn):
            with pytest.raises(RuntimeError, match="boom"):
                with SqlClient().connect(server_connection):
                    raise RuntimeError("boom")

        mock_conn.close.assert_called_once()

    def test_connect_failure_propagates(self, server_connection):
        with patch(PYODBC_CONNECT, side_effect=pyodbc.OperationalError("HYT00", "Login timeout expired")):
            with pytest.raises(pyodbc.OperationalError):
                with SqlClient().connect(server_connection):
                    pass


class TestScalar:
    def test_returns_first_column(self, mock_conn, mock_cursor):
        mock_cursor.execute.return_value.fetchone.return_value = (7, "ignored")

        assert SqlClient().scalar(mock_conn, "SELECT DB_ID(?)", "Acme") == 7

        mock_cursor.execute.assert_called_once_with("SELECT DB_ID(?)", "Acme")
        mock_cursor.close.assert_called_once()

    def test_returns_none_without_rows(self, mock_conn, mock_cursor):
        mock_cursor.execute.return_value.fetchone.return_value = None

        assert SqlClient().scalar(mock_conn, "SELECT DB_ID(?)", "Missing") is None
        mock_cursor.close.assert_called_once()

    def test_cursor_closed_on_error(self, mock_conn, mock_cursor):
        mock_cursor.execute.side_effect = pyodbc.ProgrammingError("42000", "Incorrect syntax")

        with pytest.raises(pyodbc.ProgrammingError):
            SqlClient().scalar(mock_conn, "SELEC 1")

        mock_cursor.close.assert_called_once()


class TestExecute:
    def test_drains_every_result_set(self, mock_conn, mock_cursor):
        mock_cursor.nextset.side_effect = [True, True, False]

        SqlClient().execute(mock_conn, "SELECT 1; SELECT 2; SELECT 3")

        mock_cursor.execute.assert_called_once_with("SELECT 1; SELECT 2; SELECT 3")
        assert mock_cursor.nextset.call_count == 3
        mock_cursor.close.assert_called_once()

    def test_error_in_later_statement_surfaces(self, mock_conn, mock_cursor):
        mock_cursor.nextset.side_effect = [True, pyodbc.ProgrammingError("42S02", "Invalid object name 'dbo.Missing'")]

        with pytest.raises(pyodbc.ProgrammingError, match="dbo.Missing"):
            SqlClient().execute(mock_conn, "SELECT 1; SELECT * FROM dbo.Missing")

        mock_cursor.close.assert_called_once()

    def test_single_statement_batch(self, mock_conn, mock_cursor):
        mock_cursor.nextset.return_value = False

        SqlClient().execute(mock_conn, "CREATE DATABASE [Acme]")

        mock_cursor.nextset.assert_called_once()
