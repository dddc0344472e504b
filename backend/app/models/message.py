"""
Database model for anonymous messages.
Messages have no life of their own: they are created by the public
send-message endpoint, read and deleted only by their owner, never edited.
"""
import uuid
from tortoise import fields, models

CONTENT_MAX_LENGTH = 300
CATEGORY_MAX_LENGTH = 64


class Message(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="messages",
        on_delete=fields.CASCADE,
    )  # cascade delete (if user is deleted, messages are deleted)
    content = fields.CharField(max_length=CONTENT_MAX_LENGTH)
    category = fields.CharField(max_length=CATEGORY_MAX_LENGTH, null=True)  # Free-form label
    created_at = fields.DatetimeField(auto_now_add=True, index=True)

    class Meta:
        table = "messages"
        ordering = ["-created_at"]

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "content": self.content,
            "category": self.category,
            "createdAt": self.created_at.isoformat(),
        }
