####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import List
from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from pydantic import Field


# create (Crud)
class CreateHiveRequest(BaseModel):
    """Request body for creating a hive. Timestamps are ISO-8601 strings."""

    title: Optional[str] = None
    recipient_name: Optional[str] = None
    mode: Optional[str] = Field(default=None, examples=["live", "reveal"])
    reveal_at: Optional[str] = Field(default=None, examples=["2026-12-24T18:00:00Z"])
    closes_at: Optional[str] = Field(default=None, examples=["2026-12-24T20:00:00Z"])


class CreateHiveResponse(BaseModel):
    """Tokens are returned once, here, and never again."""

    Message: str
    HiveId: UUID
    ModeratorToken: str
    RecipientToken: str
    ContributorLink: str
    ModeratorLink: str
    RecipientLink: str


# read (cRud)
class HiveResponse(BaseModel):
    """Public view of a hive."""

    HiveId: UUID
    Title: str
    RecipientName: str
    Mode: str
    RevealAt: Optional[datetime]
    ClosesAt: datetime
    State: str
    IsClosed: bool
    IsRevealed: bool
    Harvested: bool
    ThankYouMessage: Optional[str]
    MessageCount: int


class VerifyAccessRequest(BaseModel):
    token: Optional[str] = None


class VerifyAccessResponse(BaseModel):
    Authorized: bool
    Role: str


class MessageItem(BaseModel):
    MessageId: UUID
    ContributorName: str
    Message: str
    CreatedAt: datetime


class ListMessagesResponse(BaseModel):
    """Messages newest first. Empty with Revealed=false before the reveal time."""

    Revealed: bool
    Count: int
    Messages: List[MessageItem]


class SubmitMessageRequest(BaseModel):
    contributor_name: Optional[str] = None
    message: Optional[str] = None


class SubmitMessageResponse(BaseModel):
    Message: str
    MessageId: UUID


class SubscribeRequest(BaseModel):
    email: Optional[str] = None


class SubscribeResponse(BaseModel):
    Message: str


class HarvestRequest(BaseModel):
    thank_you_message: Optional[str] = None


class HarvestResponse(BaseModel):
    Message: str
    SentCount: int
    AttemptedCount: int
