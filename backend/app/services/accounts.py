"""
Account lifecycle: registration, email verification, username availability,
credential authentication and account removal.

A user moves pending -> active exactly once, via verify() with the correct,
unexpired code. An expired code leaves the record pending for good; the owner
has to sign up again, which reuses the same record (keyed by email).
"""
import datetime as dt
import logging
import re

from email_validator import EmailNotValidError, validate_email
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from app.core.errors import (
    CodeExpired,
    CodeInvalid,
    Conflict,
    NotFound,
    Unauthorized,
    UpstreamError,
    ValidationFailed,
)
from app.core.security import (
    VERIFY_CODE_TTL,
    generate_verify_code,
    hash_password,
    verify_password,
)
from app.models.message import Message
from app.models.user import User
from app.schemas.auth import (
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    USERNAME_PATTERN,
)
from app.services import mailer

logger = logging.getLogger("uvicorn.error")

_USERNAME_RE = re.compile(USERNAME_PATTERN)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    # Naive values coming back from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def validate_username(candidate: str) -> str:
    """Return the candidate unchanged, or raise ValidationFailed describing the first broken rule."""
    if candidate is None or len(candidate) < USERNAME_MIN_LENGTH:
        raise ValidationFailed(f"Username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(candidate) > USERNAME_MAX_LENGTH:
        raise ValidationFailed(f"Username must be no more than {USERNAME_MAX_LENGTH} characters")
    if not _USERNAME_RE.match(candidate):
        raise ValidationFailed("Username must not contain special characters")
    return candidate


def normalize_email(address: str) -> str:
    """Same normalization EmailStr applies at sign-up (domain lowercased); raw value if unparsable."""
    try:
        return validate_email(address, check_deliverability=False).normalized
    except EmailNotValidError:
        return address


async def active_user_by_username(username: str) -> User | None:
    return await User.get_or_none(active_username=username)


async def register(username: str, email: str, password: str) -> str:
    """
    Create (or refresh) a pending account and mail its verification code.

    Returns:
        Success message for the response envelope.

    Raises:
        ValidationFailed: malformed username or too-short password
        Conflict: username held by an active user, or email already verified
        UpstreamError: the record was saved but the mail could not be sent
    """
    validate_username(username)
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationFailed(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    if await active_user_by_username(username):
        raise Conflict("Username is already taken")

    email = normalize_email(email)
    code = generate_verify_code()
    expiry = utcnow() + VERIFY_CODE_TTL
    password_hash = hash_password(password)

    existing = await User.get_or_none(email=email)
    if existing and existing.is_verified:
        raise Conflict("User already exists with this email")

    if existing:
        # Pending record with this email: the new sign-up takes over the slot
        existing.username = username
        existing.password_hash = password_hash
        existing.verify_code = code
        existing.verify_code_expiry = expiry
        await existing.save(update_fields=["username", "password_hash", "verify_code", "verify_code_expiry"])
        logger.info("[accounts] refreshed pending registration for %s", username)
    else:
        try:
            await User.create(
                username=username,
                email=email,
                password_hash=password_hash,
                verify_code=code,
                verify_code_expiry=expiry,
                is_verified=False,
                is_accepting_messages=True,
            )
        except IntegrityError:
            # Another sign-up for the same email landed first
            raise Conflict("User already exists with this email")
        logger.info("[accounts] created pending registration for %s", username)

    result = await mailer.send_verification_email(email, username, code)
    if not result.success:
        # The pending record stays; signing up again re-sends a fresh code
        raise UpstreamError(result.message)

    return "User registered successfully. Please verify your account."


async def verify(username: str, code: str) -> str:
    """
    Activate the pending account for `username` whose code matches.

    Raises:
        NotFound: no pending account with that username
        CodeExpired: the matching code (or every outstanding code) has expired
        CodeInvalid: the code does not match
        Conflict: another account with the same username was verified first
    """
    candidates = await User.filter(username=username, is_verified=False).order_by("-created_at")
    if not candidates:
        raise NotFound("User not found")

    now = utcnow()

    def expired(user: User) -> bool:
        return user.verify_code_expiry is None or as_utc(user.verify_code_expiry) < now

    match = next((u for u in candidates if u.verify_code is not None and u.verify_code == code), None)
    if match is None:
        if all(expired(u) for u in candidates):
            raise CodeExpired()
        raise CodeInvalid()
    if expired(match):
        raise CodeExpired()

    if await active_user_by_username(username):
        raise Conflict("Username is already taken")
    try:
        # The unique active_username column decides concurrent claims on one name
        updated = await User.filter(id=match.id, is_verified=False).update(
            is_verified=True,
            active_username=username,
            verify_code=None,
            verify_code_expiry=None,
        )
    except IntegrityError:
        raise Conflict("Username is already taken")
    if not updated:
        raise NotFound("User not found")

    logger.info("[accounts] verified %s", username)
    return "Account verified successfully"


async def check_username_available(candidate: str) -> str:
    """
    Raises:
        ValidationFailed: candidate breaks the sign-up username rules
        Conflict: an active user owns it (payload available=False)
    """
    validate_username(candidate)
    if await active_user_by_username(candidate):
        raise Conflict("Username is already taken", available=False)
    return "Username is unique"


async def authenticate(identifier: str, password: str) -> User:
    """
    Resolve an active user from username-or-email plus password.

    Raises:
        Unauthorized: unknown identifier, wrong password, or unverified account
    """
    user = None
    if "@" in identifier:
        user = await User.get_or_none(email=normalize_email(identifier))
    else:
        user = await active_user_by_username(identifier)
        if user is None:
            user = await User.filter(username=identifier).order_by("-created_at").first()

    if not user or not verify_password(password, user.password_hash):
        raise Unauthorized("Incorrect username/email or password")
    if not user.is_verified:
        raise Unauthorized("Please verify your account before signing in")
    return user


async def delete_account(user: User) -> None:
    """Remove the user together with every message it owns."""
    async with in_transaction():
        await Message.filter(user_id=user.id).delete()
        await User.filter(id=user.id).delete()
    logger.info("[accounts] deleted account %s", user.username)
