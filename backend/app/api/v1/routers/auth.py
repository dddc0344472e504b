from fastapi import APIRouter, Depends, Query, Response, status
from app.api.v1.deps import SESSION_COOKIE, get_current_user
from app.core.errors import envelope
from app.core.security import ACCESS_TOKEN_EXPIRE_MINUTES, create_access_token
from app.models.user import User
from app.schemas.auth import SignInIn, SignUpIn, UserOut, VerifyCodeIn
from app.services import accounts

router = APIRouter(tags=["auth"])


def _user_out(user: User) -> dict:
    return UserOut(
        id=str(user.id),
        username=user.username,
        email=user.email,
        isAcceptingMessages=user.is_accepting_messages,
    ).model_dump()


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
async def sign_up(body: SignUpIn):
    """
    Register a pending account and email its verification code.

    Args:
        body: Request body containing:
            - username: str (2-20 chars, letters/digits/underscore)
            - email: str (one account per address)
            - password: str (at least 6 chars, hashed before storage)

    Returns:
        dict: {"success": True, "message": ...}

    Failures (envelope with success=False):
        - 400: invalid input, username taken, email already verified
        - 500: verification mail could not be sent (the pending account is kept)
    """
    message = await accounts.register(body.username, str(body.email), body.password)
    return envelope(True, message)


@router.post("/verify-code")
async def verify_code(body: VerifyCodeIn):
    """
    Confirm a pending account with its one-time code.

    Failures:
        - 404: no pending account with that username
        - 400: wrong code, expired code, or username claimed by someone else first
    """
    message = await accounts.verify(body.username, body.code)
    return envelope(True, message)


@router.get("/check-username-unique")
async def check_username_unique(username: str = Query("")):
    """
    Username availability for the sign-up form.

    A well-formed name answers with `available`; a malformed one is a plain
    400 envelope without that key.
    """
    message = await accounts.check_username_available(username)
    return envelope(True, message, available=True)


@router.post("/sign-in")
async def sign_in(body: SignInIn, response: Response):
    """
    Authenticate with username-or-email and password.

    The session token is returned in the body and also set as an HttpOnly
    cookie named "accessToken" for browser clients.

    Raises:
        Unauthorized (401): bad credentials or account not verified yet
    """
    user = await accounts.authenticate(body.identifier, body.password)
    token = create_access_token(str(user.id), user.username)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return envelope(True, "Signed in successfully", accessToken=token, user=_user_out(user))


@router.post("/sign-out")
async def sign_out(response: Response):
    """
    Clear the session cookie. Always succeeds, even without a cookie.

    Note:
        The token itself stays valid until it expires.
    """
    response.delete_cookie(SESSION_COOKIE)
    return envelope(True, "Signed out")


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return envelope(True, "OK", user=_user_out(user))


@router.delete("/account")
async def delete_account(response: Response, user: User = Depends(get_current_user)):
    """Delete the signed-in account and all of its messages, then end the session."""
    await accounts.delete_account(user)
    response.delete_cookie(SESSION_COOKIE)
    return envelope(True, "Account deleted")
