"""Monitoring package for logging and observability."""

from tenantdb_api.monitoring.logger import configure_logger
from tenantdb_api.monitoring.logger import mask_connection_string

__all__ = [
    "configure_logger",
    "mask_connection_string",
]
