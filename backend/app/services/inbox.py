"""
Inbox operations over a user's messages.

submit() is the only public write path and is anonymous: nothing about the
sender is stored. Every other operation receives the session owner and is
filtered by it, so an owner can never read or delete someone else's message.
"""
import logging
import uuid

from app.core.errors import Forbidden, NotFound, ValidationFailed
from app.models.message import CONTENT_MAX_LENGTH, Message
from app.models.user import User
from app.services.accounts import active_user_by_username

logger = logging.getLogger("uvicorn.error")


async def submit(username: str, content: str, category: str | None = None) -> Message:
    """
    Append an anonymous message to an active user's inbox.

    Raises:
        NotFound: no active user owns `username`
        Forbidden: the owner is not accepting messages
        ValidationFailed: empty or over-long content
    """
    owner = await active_user_by_username(username)
    if owner is None:
        raise NotFound("User not found")
    if not owner.is_accepting_messages:
        raise Forbidden("User is not accepting messages")

    text = (content or "").strip()
    if not text:
        raise ValidationFailed("Message cannot be empty")
    if len(text) > CONTENT_MAX_LENGTH:
        raise ValidationFailed(f"Message must be no longer than {CONTENT_MAX_LENGTH} characters")

    label = (category or "").strip() or None
    # Single INSERT: concurrent submissions never overwrite each other
    return await Message.create(user=owner, content=text, category=label)


async def list_messages(owner: User, category: str | None = None) -> list[Message]:
    query = Message.filter(user_id=owner.id)
    if category:
        query = query.filter(category=category)
    return await query.order_by("-created_at")


async def get_accepting_state(owner: User) -> bool:
    return owner.is_accepting_messages


async def set_accepting_state(owner: User, value: bool) -> bool:
    await User.filter(id=owner.id).update(is_accepting_messages=value)
    owner.is_accepting_messages = value
    return value


async def delete_message(owner: User, message_id: str) -> None:
    """
    Delete one of the owner's messages.

    Raises:
        NotFound: the id is malformed, unknown, belongs to another owner, or was
            already removed by a concurrent request
    """
    try:
        mid = uuid.UUID(str(message_id))
    except ValueError:
        raise NotFound("Message not found or already deleted")

    deleted = await Message.filter(id=mid, user_id=owner.id).delete()
    if not deleted:
        raise NotFound("Message not found or already deleted")
    logger.debug("[inbox] %s deleted message %s", owner.username, mid)
