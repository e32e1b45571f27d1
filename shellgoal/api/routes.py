"""API routes for the goal bot."""

import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from config.settings import settings
from shellgoal.bot.channel import OutboxRegistry
from shellgoal.bot.chunker import chunk_text
from shellgoal.bot.dispatcher import GoalDispatcher, IncomingMessage
from shellgoal.errors import MissingCredentials, RunAborted

logger = logging.getLogger(__name__)

router = APIRouter()


def get_dispatcher(request: Request) -> GoalDispatcher:
    return request.app.state.dispatcher


def get_outboxes(request: Request) -> OutboxRegistry:
    return request.app.state.outboxes


# Request/Response models


class MessageRequest(BaseModel):
    """An incoming chat message."""

    user_id: str = Field(..., description="Unique id of the author")
    username: str = Field(default="", description="Display name of the author")
    content: str = Field(..., description="Message text")
    is_bot: bool = Field(default=False, description="Whether a bot authored the message")
    is_direct: bool = Field(default=False, description="Whether the message was sent privately")


class MessageAccepted(BaseModel):
    """Response model for message submission."""

    accepted: bool = Field(..., description="Whether the message started new work")


class OutboxResponse(BaseModel):
    """Messages queued for a user since the last poll."""

    messages: list[str]


class GoalRequest(BaseModel):
    """Request model for synchronous goal runs."""

    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(..., description="User whose stored API keys are used")
    goal: str = Field(..., min_length=1, description="Natural-language goal")


class GoalResponse(BaseModel):
    """Response model for synchronous goal runs."""

    status: str
    iterations: int
    messages: list[str]


# Endpoints


@router.post("/messages", response_model=MessageAccepted)
async def post_message(body: MessageRequest, request: Request) -> MessageAccepted:
    """
    Deliver a chat message.

    Replies (onboarding prompts, goal transcripts) are queued in the author's
    outbox and fetched with GET /messages/{user_id}.
    """
    outbox = get_outboxes(request).for_user(body.user_id)
    event = IncomingMessage(
        user_id=body.user_id,
        username=body.username,
        content=body.content,
        channel=outbox,
        is_bot=body.is_bot,
        is_direct=body.is_direct,
    )
    task = get_dispatcher(request).handle_incoming(event)
    return MessageAccepted(accepted=task is not None)


@router.get("/messages/{user_id}", response_model=OutboxResponse)
async def get_messages(user_id: str, request: Request) -> OutboxResponse:
    """Return and clear the messages queued for a user."""
    return OutboxResponse(messages=get_outboxes(request).drain(user_id))


@router.post("/goals", response_model=GoalResponse)
async def run_goal(body: GoalRequest, request: Request) -> GoalResponse:
    """Run a goal to completion and return the chunked transcript."""
    dispatcher = get_dispatcher(request)
    try:
        outcome = await dispatcher.run_goal(body.user_id, body.goal)
    except MissingCredentials as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RunAborted as e:
        logger.error(f"Goal run aborted: {e}")
        raise HTTPException(status_code=502, detail=f"Goal run aborted: {e}")

    return GoalResponse(
        status=outcome.status.value,
        iterations=outcome.iterations,
        messages=chunk_text(outcome.message, settings.max_message_length),
    )
