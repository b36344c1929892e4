"""Monitoring package for logging and request context."""

from hive_api.monitoring.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
]
