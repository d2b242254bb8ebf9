import json
import logging
import re
import sys
import traceback

import loguru
from fastapi import Response
from loguru import logger

_SECRET_KEYS = ("password", "pwd")
_SECRET_PATTERN = re.compile(
    r"(?i)(^|[;\s])(\s*(?:" + "|".join(_SECRET_KEYS) + r")\s*=\s*)(\{[^}]*\}|'[^']*'|\"[^\"]*\"|[^;\r\n]*)"
)


# Loggers configuration runs at the start of the application -- src/tenantdb_api/__init__.py
def configure_logger(log_level: str = "INFO"):
    """
    Configure loguru logger with the console sink.

    Args:
        log_level: Minimum level written to stdout
    """
    # pyodbc and asyncpg are quiet, uvicorn access logs are not
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger.remove()  # remove the default logger

    logger.add(
        sink=sys.stdout,
        diagnose=False,
        level=log_level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <bold><white>{message}</white></bold> | <dim>{extra}</dim> {stacktrace}",
        filter=process_log_record,
    )


def process_log_record(record: "loguru.Record") -> "loguru.Record":
    r"""
    Inject transformed metadata into each log record before they are passed to the formatter.

    1. Serialize the "extra" field to JSON so that renders nicely in log aggregators.
    2. For error logs, add a traceback with \r instead of \n so that the aggregator does not
       split the traceback into multiple log events.
    """
    extra = record["extra"]

    # serialize "extra" field to JSON
    if extra:
        record["extra"] = json.dumps(extra, default=str)

    # add stacktrace to log record
    record["stacktrace"] = ""
    if record["exception"]:
        err = record["exception"]
        stacktrace = get_formatted_stacktrace(err, replace_newline_character_with_carriage_return=True)
        record["stacktrace"] = stacktrace

    return record


def get_formatted_stacktrace(loguru_record_exception, replace_newline_character_with_carriage_return: bool) -> str:
    """Get the formatted stacktrace for the current exception."""
    exc_type, exc_value, exc_traceback = loguru_record_exception
    stacktrace_: list[str] = traceback.format_exception(exc_type, exc_value, exc_traceback)
    stacktrace: str = "".join(stacktrace_)
    if replace_newline_character_with_carriage_return:
        stacktrace = stacktrace.replace("\n", "\r")
    return stacktrace


def mask_connection_string(connection_string: str) -> str:
    """Replace password values in a connection string so it can be logged."""
    if not connection_string:
        return connection_string
    return _SECRET_PATTERN.sub(lambda m: f"{m.group(1)}{m.group(2)}***", connection_string)


def log_response_info(response: Response):
    """Log the response info."""
    response_info = {
        "status_code": response.status_code,
        "headers": dict(response.headers.items()),
    }
    logger.debug("Response sent", http_response=response_info)
