"""
Pydantic schemas for registration, verification and sign-in endpoints.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.security import VERIFY_CODE_LENGTH

# Shared by sign-up and the username availability check
USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6

__all__ = [
    "USERNAME_PATTERN",
    "USERNAME_MIN_LENGTH",
    "USERNAME_MAX_LENGTH",
    "PASSWORD_MIN_LENGTH",
    "SignUpIn",
    "VerifyCodeIn",
    "SignInIn",
    "UserOut",
]


class SignUpIn(BaseModel):
    """Request body for /sign-up."""
    username: str = Field(
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
        pattern=USERNAME_PATTERN,
    )
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)


class VerifyCodeIn(BaseModel):
    username: str
    code: str = Field(min_length=1)

    @field_validator("code", mode="before")
    @classmethod
    def _numeric_code(cls, value):
        # JSON numbers lose leading zeros: 4219 -> "004219"
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value).zfill(VERIFY_CODE_LENGTH)
        return value


class SignInIn(BaseModel):
    """Credentials; identifier is either the username or the email address."""
    identifier: str
    password: str


class UserOut(BaseModel):
    """
    Session owner as returned by /sign-in and /me.
    Contains no credentials or verification data.
    """
    id: str
    username: str
    email: str
    isAcceptingMessages: bool
