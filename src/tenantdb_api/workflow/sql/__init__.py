"""SQL Server helpers: identifiers, connection strings, batches and the pyodbc client."""

from tenantdb_api.workflow.sql.batch_splitter import split_batches
from tenantdb_api.workflow.sql.client import SqlClient
from tenantdb_api.workflow.sql.connection_string import SqlConnectionString
from tenantdb_api.workflow.sql.connection_string import normalize_connection_string
from tenantdb_api.workflow.sql.identifiers import IdentifierSanitizer
from tenantdb_api.workflow.sql.identifiers import quote_identifier
from tenantdb_api.workflow.sql.identifiers import validate_identifier

__all__ = [
    "split_batches",
    "SqlClient",
    "SqlConnectionString",
    "normalize_connection_string",
    "IdentifierSanitizer",
    "quote_identifier",
    "validate_identifier",
]
