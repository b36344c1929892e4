import json
import sys
import traceback

import loguru
from fastapi import Response
from loguru import logger

# Query parameters and headers that carry hive bearer tokens
SECRET_QUERY_PARAMS = {"token"}
SECRET_HEADERS = {"x-hive-token", "authorization"}
SECRET_BODY_FIELDS = {"token"}
REDACTED = "***redacted***"


# Loggers configuration runs at the start of the application -- hive_api.main.create_app
def configure_logger(level: str = "INFO"):
    """
    Configure loguru logger with a structured stdout sink.

    Args:
        level: Minimum log level written to stdout
    """
    logger.remove()  # remove the default logger

    logger.add(
        sink=sys.stdout,
        level=level.upper(),
        diagnose=False,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <bold><white>{message}</white></bold> | <dim>{extra}</dim> {stacktrace}",
        filter=process_log_record,
    )


def process_log_record(record: "loguru.Record") -> "loguru.Record":
    r"""
    Inject transformed metadata into each log record before they are passed to the formatter.

    1. Serialize the "extra" field to JSON so that it renders on one line.
    2. For error logs, add a traceback with \r instead of \n so that log collectors do not
       split the traceback into multiple log events.
    """
    extra = record["extra"]

    if extra:
        record["extra"] = json.dumps(extra, default=str)

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


def redact_query_params(query_params) -> dict:
    """Return query parameters with bearer tokens masked."""
    return {key: (REDACTED if key.lower() in SECRET_QUERY_PARAMS else value) for key, value in query_params.items()}


def redact_headers(headers) -> dict:
    """Return headers with bearer tokens masked."""
    return {key: (REDACTED if key.lower() in SECRET_HEADERS else value) for key, value in headers.items()}


def redact_body(body):
    """Return a JSON request body with bearer tokens masked (top level only)."""
    if not isinstance(body, dict):
        return body
    return {key: (REDACTED if key.lower() in SECRET_BODY_FIELDS else value) for key, value in body.items()}


def log_response_info(response: Response):
    """Log the response info."""
    response_info = {
        "status_code": response.status_code,
        "headers": dict(response.headers.items()),
    }
    logger.debug("Response sent", http_response=response_info)
