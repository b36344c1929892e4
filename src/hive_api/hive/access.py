"""
Access Verification

Maps a presented bearer token to the role it grants on one hive.
No sessions and no side effects: safe to call on every protected read.
"""

import hmac
from typing import Optional
from uuid import UUID

from loguru import logger

from hive_api.hive.enums import Role
from hive_api.hive.models import parse_hive_id


def _matches(presented: str, expected: str) -> bool:
    """Exact string equality in constant time. Lone surrogates compare as their raw code units."""
    return hmac.compare_digest(
        presented.encode("utf-8", "surrogatepass"),
        expected.encode("utf-8", "surrogatepass"),
    )


async def verify_access(store, hive_id: UUID | str, token: Optional[str]) -> Role:
    """
    Decide whether the caller is the moderator, the recipient, or unauthorized.

    Parameters
    ----------
    store : HiveStore
        Store used to look up the hive's secret pair
    hive_id : UUID | str
        Hive the token is presented for
    token : str, optional
        Presented bearer token

    Returns
    -------
    Role
        MODERATOR or RECIPIENT on an exact match, otherwise UNAUTHORIZED.
        A missing token returns UNAUTHORIZED without a store lookup.
    """
    if not token:
        return Role.UNAUTHORIZED

    parsed_id = parse_hive_id(hive_id)
    if parsed_id is None:
        return Role.UNAUTHORIZED

    secrets = await store.get_secrets(parsed_id)
    if secrets is None:
        logger.debug("Token presented for unknown hive", hive_id=str(parsed_id))
        return Role.UNAUTHORIZED

    if _matches(token, secrets.moderator_token):
        return Role.MODERATOR
    if _matches(token, secrets.recipient_token):
        return Role.RECIPIENT
    return Role.UNAUTHORIZED
