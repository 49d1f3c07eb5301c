"""
Messaging API endpoints.

Sending, reading and blocking. Only the sender or the receiver of a
thread may read it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import current_user
from cardex.db.database import get_session
from cardex.models.failure import ForbiddenError
from cardex.services import messaging

router = APIRouter(tags=["messages"])


class SendMessageRequest(BaseModel):
    """Request model for sending a message."""

    text: str = Field(..., min_length=1, max_length=4000, description="Message text")


class ThreadResponse(BaseModel):
    """The messages from one sender to one receiver."""

    sender: str
    receiver: str
    messages: list[str] = Field(default_factory=list)
    read: bool


class BlockListResponse(BaseModel):
    """The acting user's block list."""

    user: str
    blocked: list[str] = Field(default_factory=list)


class MessagingStatusResponse(BaseModel):
    """Outcome message for messaging writes."""

    msg: str


@router.post(
    "/messages/{receiver}",
    response_model=MessagingStatusResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    receiver: str,
    request: SendMessageRequest,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessagingStatusResponse:
    """Send a message. Fails with 403 if either user has blocked the other."""
    await messaging.send_message(session, user, receiver, request.text)
    return MessagingStatusResponse(msg="Message sent!")


@router.get("/messages/{sender}/{receiver}", response_model=ThreadResponse)
async def read_messages(
    sender: str,
    receiver: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ThreadResponse:
    """
    Read every message from sender to receiver and mark them read.

    The acting user must be the sender or the receiver.
    """
    if user not in (sender, receiver):
        raise ForbiddenError("You can only read threads you are part of")

    thread = await messaging.read_thread(session, sender, receiver)
    return ThreadResponse(
        sender=thread.sender,
        receiver=thread.receiver,
        messages=thread.messages,
        read=thread.read,
    )


@router.get("/blocks", response_model=BlockListResponse)
async def list_blocks(
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> BlockListResponse:
    """List the users the acting user has blocked."""
    return BlockListResponse(user=user, blocked=await messaging.blocked_users(session, user))


@router.post("/blocks/{target}", response_model=MessagingStatusResponse)
async def block(
    target: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessagingStatusResponse:
    """Block a user. Fails with 409 if already blocked."""
    await messaging.block_user(session, user, target)
    return MessagingStatusResponse(msg="User blocked!")


@router.delete("/blocks/{target}", response_model=MessagingStatusResponse)
async def unblock(
    target: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessagingStatusResponse:
    """Unblock a user. Fails with 404 if not blocked."""
    await messaging.unblock_user(session, user, target)
    return MessagingStatusResponse(msg="User unblocked!")
