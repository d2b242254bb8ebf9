"""tenantdb_api."""

from .monitoring.logger import configure_logger

# Console logging only; the app factory reconfigures with the configured level
configure_logger()
