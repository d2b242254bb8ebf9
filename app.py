"""Tenant database provisioning service.

Serves the health and provisioning API. With CONTROL_DB_CONNECTION_STRING set the
workflow is wired, and ENABLE_SCHEDULER=true also starts the polling loop in-process.
Run a single pass without the API via scripts/run_provisioning.py.

    uvicorn app:app --host 0.0.0.0 --port 8000
"""

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tenantdb_api.main import create_app  # noqa: E402

# One scheduler per process: run a single worker when ENABLE_SCHEDULER is on
app = create_app()
