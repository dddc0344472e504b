from fastapi import APIRouter, Depends, Query, status
from app.api.v1.deps import get_current_user
from app.core.errors import NotFound, envelope
from app.models.user import User
from app.schemas.message import AcceptMessagesIn, MessageOut, SendMessageIn
from app.services import inbox
from app.services.accounts import active_user_by_username

router = APIRouter(tags=["messages"])


# ===== Public =====
@router.post("/send-message", status_code=status.HTTP_201_CREATED)
async def send_message(body: SendMessageIn):
    """
    Anonymously append a message to `username`'s inbox.

    Failures:
        - 404: no active user with that username
        - 403: the user is not accepting messages
        - 400: empty or too long content
    """
    await inbox.submit(body.username, body.content, body.category)
    return envelope(True, "Message sent successfully")


@router.get("/u/{username}")
async def public_profile(username: str):
    """Whether `username` exists and currently accepts messages (used by the send page)."""
    user = await active_user_by_username(username)
    if user is None:
        raise NotFound("User not found")
    return envelope(
        True,
        "OK",
        username=user.username,
        isAcceptingMessages=user.is_accepting_messages,
    )


# ===== Owner dashboard =====
@router.get("/accept-messages")
async def get_accept_messages(user: User = Depends(get_current_user)):
    accepting = await inbox.get_accepting_state(user)
    return envelope(True, "OK", isAcceptingMessages=accepting)


@router.post("/accept-messages")
async def set_accept_messages(body: AcceptMessagesIn, user: User = Depends(get_current_user)):
    """
    Overwrite the accepting-messages flag. Repeating the same value is a no-op
    that still reports success.
    """
    accepting = await inbox.set_accepting_state(user, body.acceptMessages)
    message = "Message acceptance enabled" if accepting else "Message acceptance disabled"
    return envelope(True, message, isAcceptingMessages=accepting)


@router.get("/get-messages")
async def get_messages(
    user: User = Depends(get_current_user),
    category: str | None = Query(None, max_length=64),
):
    """
    List the owner's messages, newest first.

    Args:
        category: optional exact-match filter on the message label

    Returns:
        dict: {"success": True, "message": ..., "messages": [MessageOut, ...]}
            An empty inbox is an empty list, not an error.
    """
    rows = await inbox.list_messages(user, category=category)
    messages = [MessageOut(**m.to_dict()).model_dump() for m in rows]
    return envelope(True, "OK", messages=messages)


@router.delete("/delete-message/{message_id}")
async def delete_message(message_id: str, user: User = Depends(get_current_user)):
    await inbox.delete_message(user, message_id)
    return envelope(True, "Message deleted")
