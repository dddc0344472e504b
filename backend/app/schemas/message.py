"""
Pydantic schemas for message submission and the owner dashboard.
"""
from typing import Optional

from pydantic import BaseModel, Field

from app.models.message import CATEGORY_MAX_LENGTH

__all__ = ["SendMessageIn", "AcceptMessagesIn", "MessageOut", "SuggestIn"]


class SendMessageIn(BaseModel):
    """
    Anonymous submission. Content emptiness/length is checked by the service
    after the recipient lookup, so a closed or unknown inbox is reported first.
    """
    username: str
    content: str
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH)


class AcceptMessagesIn(BaseModel):
    acceptMessages: bool


class MessageOut(BaseModel):
    id: str
    content: str
    category: Optional[str] = None
    createdAt: str  # ISO-8601, UTC


class SuggestIn(BaseModel):
    prompt: Optional[str] = None  # Falls back to the built-in prompt
