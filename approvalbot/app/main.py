"""FastAPI front door for the approval bot.

Callers submit orders for approval, recipients answer them in chat, and
every answer is reported back to the caller's webhook. The chat connection
itself is owned by a separate messaging gateway, which pushes inbound
messages to ``/v1/inbound``.

Run with ``uvicorn approvalbot.app.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from approvalbot.api.core.container import get_container
from approvalbot.api.routes import register_routes

tags_metadata = [
    {
        "name": "Orders",
        "description": "Submit orders that need human approval over chat"
    },
    {
        "name": "Messages",
        "description": "Send plain chat messages"
    },
    {
        "name": "Session",
        "description": "Connection status and logout of the chat session"
    },
    {
        "name": "Inbound",
        "description": "Chat messages pushed by the messaging gateway"
    }
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = get_container()
    container.startup()
    yield
    await container.shutdown()


app = FastAPI(
    title='Chat Approval Bot',
    version='1.0.0',
    description='Order approvals over chat with webhook callbacks',
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Register all API routes
register_routes(app)
