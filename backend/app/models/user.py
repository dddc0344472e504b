"""
Database model for users.
A user is either pending (unverified, holding a one-time code and its expiry)
or active (verified). Only active users can sign in or receive messages.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model (aggregate root).

    Relationships:
    - Has many Messages (one-to-many, via related_name="messages"); messages
      are deleted together with their owner

    Security:
    - Password is stored as an Argon2 hash (never plain text)
    - Email is unique: one record per address, pending or active
    - Username is unique among active users only; several pending records may
      carry the same username and the first one verified wins
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=32, index=True)
    email = fields.CharField(max_length=256, unique=True)
    password_hash = fields.CharField(max_length=255)

    verify_code = fields.CharField(max_length=16, null=True)  # Cleared once verified
    verify_code_expiry = fields.DatetimeField(null=True)
    is_verified = fields.BooleanField(default=False)
    # Set together with is_verified; NULL for pending records, so only active names collide
    active_username = fields.CharField(max_length=32, unique=True, null=True)

    is_accepting_messages = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    messages: fields.ReverseRelation["Message"]

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    def __str__(self) -> str:
        return self.username
