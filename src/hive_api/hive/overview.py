"""Public view of a hive: what any holder of the hive link may see."""

from datetime import datetime
from typing import NamedTuple
from uuid import UUID

from hive_api.hive.contribution import get_existing_hive
from hive_api.hive.enums import HiveState
from hive_api.hive.lifecycle import harvest_state
from hive_api.hive.lifecycle import is_closed
from hive_api.hive.lifecycle import is_revealed
from hive_api.hive.models import Hive


class HiveOverview(NamedTuple):
    hive: Hive
    state: HiveState
    is_closed: bool
    is_revealed: bool
    message_count: int


async def get_hive_overview(store, hive_id: UUID | str, now: datetime) -> HiveOverview:
    """Hive metadata, derived state and the number of messages gathered. No message bodies."""
    hive = await get_existing_hive(store, hive_id)
    return HiveOverview(
        hive=hive,
        state=harvest_state(hive, now),
        is_closed=is_closed(hive, now),
        is_revealed=is_revealed(hive, now),
        message_count=await store.count_messages(hive.id),
    )
