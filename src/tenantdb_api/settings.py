"""Settings for the tenant database provisioning API."""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings for the tenant database provisioning API.

    [pydantic.BaseSettings](https://docs.pydantic.dev/latest/concepts/pydantic_settings/) is a popular
    framework for organizing, validating, and reading configuration values from a variety of sources
    including environment variables.

    This class automatically reads from:
    1. Environment variables (production - App Service configuration)
    2. .env file (local development)

    Environment variable names are treated case-insensitively.
    """

    # Target SQL Server
    admin_connection_string: Optional[str] = None
    """ADO.NET-style connection string to the shared SQL Server. Runs are skipped when it is not set."""

    odbc_driver: str = "ODBC Driver 18 for SQL Server"
    """ODBC driver used when opening pyodbc connections."""

    sql_login_timeout_seconds: int = 30
    """Login timeout for pyodbc connections."""

    # Deployment artifacts
    package_path: Optional[str] = None
    """Path of the declarative package (.dacpac) deployed into every new project database."""

    script_path: Optional[str] = None
    """Path of the imperative create-schema script (.sql) deployed into every new project database."""

    sqlpackage_path: str = "sqlpackage"
    """SqlPackage executable used to publish declarative packages."""

    package_timeout_seconds: Optional[float] = 1800
    """Hard limit for a single package publish."""

    package_block_on_possible_data_loss: bool = False
    """Publish property BlockOnPossibleDataLoss. New databases have no data to lose."""

    package_create_new_database: bool = False
    """Publish property CreateNewDatabase (drops and recreates the target when true)."""

    # Project connection templates (chosen upstream per work item)
    integrated_connection_template: Optional[str] = None
    """Project connection string template used when the admin connection uses integrated security."""

    sql_auth_connection_template: Optional[str] = None
    """Project connection string template used for SQL authentication."""

    # Script execution
    batch_separator: str = "GO"
    """Batch separator keyword recognised by the batch splitter."""

    script_database_token: str = "$(DatabaseName)"
    """Token replaced with the project database name in the create-schema script."""

    script_start_marker: Optional[str] = "USE [master]"
    """Batches before the first batch containing this marker are not executed. Empty disables skipping."""

    script_max_attempts: int = 3
    """Attempts for executing a script before the failure is propagated."""

    script_retry_delay_seconds: float = 2.0
    """Fixed delay between script attempts."""

    database_settle_seconds: float = 2.0
    """Delay after CREATE DATABASE before the new database is used."""

    item_timeout_seconds: Optional[float] = 1800
    """Deadline for provisioning a single work item. 0 or unset disables the deadline."""

    # Identifier sanitization
    catalog_name_max_length: int = 10
    """Maximum length of the short catalog name derived from a project name."""

    database_name_max_length: int = 128
    """Maximum length of a SQL Server database name."""

    identifier_fallback: str = "DefaultProject"
    """Identifier used when a project name sanitizes to nothing."""

    identifier_digit_prefix: str = "DB_"
    """Prefix added to identifiers that would start with a digit."""

    identifier_invalid_pattern: str = r"[^A-Za-z0-9_]"
    """Regex matching characters replaced with underscores."""

    # Status codes written by the pipeline
    status_eligible: int = 1
    """Work item status picked up by the orchestrator."""

    status_completed: int = 4
    """Terminal status written on success."""

    status_failed: int = 5
    """Terminal status written on failure."""

    # Control database (work items and projects)
    control_db_connection_string: Optional[str] = None
    """PostgreSQL connection string for the control database holding work items and projects."""

    # Scheduler
    enable_scheduler: bool = False
    """Start the background provisioning loop at application startup."""

    scheduler_interval_seconds: float = 30.0
    """Delay between provisioning runs."""

    # Logging
    log_level: str = "INFO"
    """Minimum level for console logging."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",  # Load from .env file if it exists (local development)
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables not defined in the model
        validate_default=True,
    )
