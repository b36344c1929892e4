"""FastAPI dependencies for accessing app state and per-request inputs."""

from datetime import datetime
from datetime import timezone
from typing import Optional

from fastapi import Header
from fastapi import Query
from fastapi import Request

from hive_api.db.store import HiveStore
from hive_api.notifications.notifier import Notifier
from hive_api.settings import Settings


def get_settings(request: Request) -> Settings:
    """
    Get application settings from request state.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    Settings
        Application settings instance
    """
    return request.app.state.settings


def get_hive_store(request: Request) -> HiveStore:
    """Get the hive store created at application startup."""
    return request.app.state.hive_store


def get_notifier(request: Request) -> Notifier:
    """Get the notifier used for harvest notices."""
    return request.app.state.notifier


def get_now() -> datetime:
    """
    Sample the clock once for the whole request.

    Every lifecycle decision within one request uses this same value.
    """
    return datetime.now(timezone.utc)


async def get_hive_token(
    token: Optional[str] = Query(
        None,
        description="<small>*Moderator or recipient token, as found in the shared link*</small>",
    ),
    x_hive_token: Optional[str] = Header(
        None,
        alias="X-Hive-Token",
        description="<small>*Moderator or recipient token*</small>",
    ),
) -> Optional[str]:
    """
    Extract the bearer token from the X-Hive-Token header or the token query parameter.

    The header wins when both are present. Blank values count as absent; anything
    else is passed through untouched for exact comparison.
    """
    for candidate in (x_hive_token, token):
        if candidate and candidate.strip():
            return candidate
    return None
