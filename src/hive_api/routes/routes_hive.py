"""
Hive API Routes

REST endpoints for creating hives, contributing honey, reading it and harvesting.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import status
from loguru import logger

from hive_api.db.store import HiveStore
from hive_api.dependencies import get_hive_store
from hive_api.dependencies import get_hive_token
from hive_api.dependencies import get_notifier
from hive_api.dependencies import get_now
from hive_api.dependencies import get_settings
from hive_api.hive.access import verify_access
from hive_api.hive.contribution import list_messages
from hive_api.hive.contribution import submit_message
from hive_api.hive.contribution import subscribe_for_harvest_notice
from hive_api.hive.creation import create_hive
from hive_api.hive.enums import HiveState
from hive_api.hive.enums import Role
from hive_api.hive.harvest import harvest
from hive_api.hive.harvest import hive_link
from hive_api.hive.overview import get_hive_overview
from hive_api.notifications.notifier import Notifier
from hive_api.schemas.schemas import CreateHiveRequest
from hive_api.schemas.schemas import CreateHiveResponse
from hive_api.schemas.schemas import HarvestRequest
from hive_api.schemas.schemas import HarvestResponse
from hive_api.schemas.schemas import HiveResponse
from hive_api.schemas.schemas import ListMessagesResponse
from hive_api.schemas.schemas import MessageItem
from hive_api.schemas.schemas import SubmitMessageRequest
from hive_api.schemas.schemas import SubmitMessageResponse
from hive_api.schemas.schemas import SubscribeRequest
from hive_api.schemas.schemas import SubscribeResponse
from hive_api.schemas.schemas import VerifyAccessRequest
from hive_api.schemas.schemas import VerifyAccessResponse
from hive_api.settings import Settings

ROUTER_HIVE = APIRouter(tags=["Hive"], prefix="/hives")


@ROUTER_HIVE.post(
    "",
    response_model=CreateHiveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a hive",
    responses={
        201: {"description": "Hive created; tokens are shown only in this response"},
        400: {"description": "Missing or invalid title, recipient name, mode or timestamps"},
        503: {"description": "Hive store unavailable"},
    },
)
async def create_hive_endpoint(
    payload: CreateHiveRequest,
    store: HiveStore = Depends(get_hive_store),
    settings: Settings = Depends(get_settings),
):
    """Create a hive and issue its moderator and recipient tokens."""
    created = await create_hive(
        store,
        title=payload.title,
        recipient_name=payload.recipient_name,
        mode=payload.mode,
        reveal_at=payload.reveal_at,
        closes_at=payload.closes_at,
    )

    link = hive_link(settings.site_url, created.hive.id)
    return CreateHiveResponse(
        Message="Hive created successfully",
        HiveId=created.hive.id,
        ModeratorToken=created.tokens.moderator_token,
        RecipientToken=created.tokens.recipient_token,
        ContributorLink=link,
        ModeratorLink=f"{link}?token={created.tokens.moderator_token}",
        RecipientLink=f"{link}?token={created.tokens.recipient_token}",
    )


@ROUTER_HIVE.get(
    "/{hive_id}",
    response_model=HiveResponse,
    summary="Get public hive details",
    responses={404: {"description": "Hive not found"}},
)
async def get_hive_endpoint(
    hive_id: str,
    store: HiveStore = Depends(get_hive_store),
    now: datetime = Depends(get_now),
):
    """Hive metadata and derived lifecycle state. Never includes messages or tokens."""
    overview = await get_hive_overview(store, hive_id, now)
    hive = overview.hive
    return HiveResponse(
        HiveId=hive.id,
        Title=hive.title,
        RecipientName=hive.recipient_name,
        Mode=hive.mode.value,
        RevealAt=hive.reveal_at,
        ClosesAt=hive.closes_at,
        State=overview.state.value,
        IsClosed=overview.is_closed,
        IsRevealed=overview.is_revealed,
        Harvested=overview.state == HiveState.HARVESTED,
        ThankYouMessage=hive.thank_you_message,
        MessageCount=overview.message_count,
    )


@ROUTER_HIVE.post(
    "/{hive_id}/access",
    response_model=VerifyAccessResponse,
    summary="Check which role a token grants",
)
async def verify_access_endpoint(
    hive_id: str,
    payload: Optional[VerifyAccessRequest] = Body(default=None),
    token: Optional[str] = Depends(get_hive_token),
    store: HiveStore = Depends(get_hive_store),
):
    """Never fails on a bad token: absence or mismatch yields Authorized=false."""
    presented = (payload.token if payload and payload.token else None) or token
    role = await verify_access(store, hive_id, presented)
    return VerifyAccessResponse(Authorized=role != Role.UNAUTHORIZED, Role=role.value)


@ROUTER_HIVE.get(
    "/{hive_id}/messages",
    response_model=ListMessagesResponse,
    summary="List messages (moderator or recipient)",
    responses={401: {"description": "Missing or invalid token"}},
)
async def list_messages_endpoint(
    hive_id: str,
    token: Optional[str] = Depends(get_hive_token),
    store: HiveStore = Depends(get_hive_store),
    now: datetime = Depends(get_now),
):
    """Newest first. Before the reveal time the list is empty for every role."""
    listing = await list_messages(store, hive_id, token, now)
    return ListMessagesResponse(
        Revealed=listing.revealed,
        Count=len(listing.messages),
        Messages=[
            MessageItem(
                MessageId=m.id,
                ContributorName=m.contributor_name,
                Message=m.message,
                CreatedAt=m.created_at,
            )
            for m in listing.messages
        ],
    )


@ROUTER_HIVE.post(
    "/{hive_id}/messages",
    response_model=SubmitMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add honey to a hive",
    responses={
        400: {"description": "Missing name or message"},
        404: {"description": "Hive not found"},
        409: {"description": "Hive is closed"},
    },
)
async def submit_message_endpoint(
    hive_id: str,
    payload: SubmitMessageRequest,
    store: HiveStore = Depends(get_hive_store),
    now: datetime = Depends(get_now),
):
    """Anyone with the hive link may contribute while the hive is open."""
    message_id = await submit_message(store, hive_id, payload.contributor_name, payload.message, now)
    return SubmitMessageResponse(Message="Your honey was added to the Hive", MessageId=message_id)


@ROUTER_HIVE.post(
    "/{hive_id}/subscribers",
    response_model=SubscribeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Opt in to the harvest thank-you",
    responses={
        400: {"description": "Missing or invalid email"},
        404: {"description": "Hive not found"},
        409: {"description": "Hive already harvested"},
    },
)
async def subscribe_endpoint(
    hive_id: str,
    payload: SubscribeRequest,
    store: HiveStore = Depends(get_hive_store),
):
    await subscribe_for_harvest_notice(store, hive_id, payload.email)
    return SubscribeResponse(Message="You'll get the thank-you when this Hive is harvested")


@ROUTER_HIVE.post(
    "/{hive_id}/harvest",
    response_model=HarvestResponse,
    summary="Harvest a closed hive and send the thank-you",
    responses={
        400: {"description": "Missing thank-you message"},
        401: {"description": "Missing or invalid token"},
        404: {"description": "Hive not found"},
        409: {"description": "Hive not closed yet, or already harvested"},
    },
)
async def harvest_endpoint(
    hive_id: str,
    payload: HarvestRequest,
    token: Optional[str] = Depends(get_hive_token),
    store: HiveStore = Depends(get_hive_store),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
):
    """Single-shot: a second call against the same hive is rejected, never re-sent."""
    result = await harvest(
        store,
        notifier,
        hive_id,
        token,
        payload.thank_you_message,
        now,
        site_url=settings.site_url,
        timeout=settings.notification_timeout_seconds,
    )
    logger.debug("Harvest request completed", sent=result.sent_count, attempted=result.attempted_count)
    return HarvestResponse(
        Message=f"Harvest complete. Emails sent: {result.sent_count}",
        SentCount=result.sent_count,
        AttemptedCount=result.attempted_count,
    )
