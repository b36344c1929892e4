"""Capability token issuance for new hives."""

import secrets
from typing import NamedTuple

# Bytes drawn per half of a token; two halves give 64 hex characters
TOKEN_HALF_BYTES = 16


class HiveTokens(NamedTuple):
    """Bearer tokens issued once per hive."""

    moderator_token: str
    recipient_token: str


def new_token() -> str:
    """Two independent draws from the OS CSPRNG, hex encoded and concatenated."""
    return secrets.token_hex(TOKEN_HALF_BYTES) + secrets.token_hex(TOKEN_HALF_BYTES)


def issue_tokens() -> HiveTokens:
    """Issue the moderator and recipient tokens for a new hive."""
    return HiveTokens(moderator_token=new_token(), recipient_token=new_token())
