"""
Unit tests for services.accounts: registration, verification, availability,
authentication and account removal.
"""
import datetime as dt

import pytest

from app.core.errors import (
    CodeExpired,
    CodeInvalid,
    Conflict,
    NotFound,
    Unauthorized,
    UpstreamError,
    ValidationFailed,
)
from app.core.security import verify_password
from app.models.message import Message
from app.models.user import User
from app.services import accounts, inbox


pytestmark = pytest.mark.asyncio


async def _expire(username: str) -> None:
    past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(minutes=1)
    await User.filter(username=username, is_verified=False).update(verify_code_expiry=past)


async def test_alice_register_then_verify(db, outbox):
    await accounts.register("alice", "a@x.com", "pw12345")
    alice = await User.get(username="alice")
    assert alice.is_verified is False
    assert alice.is_accepting_messages is True
    assert alice.password_hash != "pw12345"
    assert verify_password("pw12345", alice.password_hash)

    code = outbox.code_for("alice")
    assert alice.verify_code == code
    wrong = "000000" if code != "000000" else "111111"
    with pytest.raises(CodeInvalid):
        await accounts.verify("alice", wrong)

    await accounts.verify("alice", code)
    alice = await User.get(username="alice")
    assert alice.is_verified is True
    assert alice.verify_code is None
    assert alice.verify_code_expiry is None


async def test_code_expires_one_hour_after_issue(db, outbox):
    before = dt.datetime.now(dt.timezone.utc)
    await accounts.register("timer", "t@x.com", "pw12345")
    after = dt.datetime.now(dt.timezone.utc)
    user = await User.get(username="timer")
    expiry = accounts.as_utc(user.verify_code_expiry)
    assert before + dt.timedelta(hours=1) <= expiry <= after + dt.timedelta(hours=1)


async def test_verify_after_expiry_fails_even_with_correct_code(db, outbox):
    await accounts.register("late", "late@x.com", "pw12345")
    await _expire("late")
    with pytest.raises(CodeExpired):
        await accounts.verify("late", outbox.code_for("late"))
    assert (await User.get(username="late")).is_verified is False


async def test_verify_unknown_username_is_not_found(db):
    with pytest.raises(NotFound):
        await accounts.verify("nobody", "123456")


async def test_reverify_active_user_is_not_a_success(db, outbox):
    await accounts.register("done", "done@x.com", "pw12345")
    code = outbox.code_for("done")
    await accounts.verify("done", code)
    with pytest.raises(NotFound):
        await accounts.verify("done", code)


async def test_pending_username_stays_available(db, outbox):
    await accounts.register("pending", "p@x.com", "pw12345")
    assert await accounts.check_username_available("pending") == "Username is unique"


async def test_active_username_is_taken(db, create_user):
    await create_user(username="taken")
    with pytest.raises(Conflict) as exc:
        await accounts.check_username_available("taken")
    assert exc.value.payload == {"available": False}


@pytest.mark.parametrize("candidate", ["a", "x" * 21, "bad name", "no-dash", ""])
async def test_malformed_username_is_validation_not_taken(db, candidate):
    with pytest.raises(ValidationFailed):
        await accounts.check_username_available(candidate)


async def test_register_rejects_active_username(db, create_user):
    await create_user(username="bob")
    with pytest.raises(Conflict, match="Username is already taken"):
        await accounts.register("bob", "other@x.com", "pw12345")


async def test_register_rejects_verified_email(db, create_user):
    user, _ = await create_user(username="carol")
    with pytest.raises(Conflict, match="email"):
        await accounts.register("carol2", user.email, "pw12345")


async def test_register_rejects_short_password(db):
    with pytest.raises(ValidationFailed):
        await accounts.register("dave", "d@x.com", "123")


async def test_reregistering_pending_email_reuses_the_record(db, outbox):
    await accounts.register("erin", "e@x.com", "first-pass")
    first = await User.get(email="e@x.com")
    first_code = outbox.code_for("erin")

    await accounts.register("erin2", "e@x.com", "second-pass")
    assert await User.filter(email="e@x.com").count() == 1
    second = await User.get(email="e@x.com")
    assert second.id == first.id
    assert second.username == "erin2"
    assert verify_password("second-pass", second.password_hash)
    assert second.verify_code == outbox.code_for("erin2")

    # the slot now answers to the new username only
    with pytest.raises(NotFound):
        await accounts.verify("erin", first_code)


async def test_mail_failure_reports_error_but_keeps_record(db, outbox):
    outbox.fail = True
    with pytest.raises(UpstreamError, match="Failed to send verification mail"):
        await accounts.register("frank", "f@x.com", "pw12345")
    assert await User.exists(email="f@x.com")


async def test_first_verified_claim_wins(db, outbox):
    await accounts.register("gina", "g1@x.com", "pw12345")
    code_one = outbox.code_for("gina")
    await accounts.register("gina", "g2@x.com", "pw12345")
    code_two = outbox.code_for("gina")

    await accounts.verify("gina", code_two)
    assert (await User.get(email="g2@x.com")).is_verified is True

    if code_one != code_two:
        with pytest.raises(Conflict):
            await accounts.verify("gina", code_one)
    assert (await User.get(email="g1@x.com")).is_verified is False


async def test_authenticate_by_username_or_email(db, create_user):
    user, password = await create_user(username="henry")
    assert (await accounts.authenticate("henry", password)).id == user.id
    assert (await accounts.authenticate(user.email, password)).id == user.id


async def test_authenticate_rejects_bad_password(db, create_user):
    await create_user(username="ivy")
    with pytest.raises(Unauthorized, match="Incorrect"):
        await accounts.authenticate("ivy", "nope-nope")


async def test_authenticate_rejects_pending_account(db, outbox):
    await accounts.register("jack", "j@x.com", "pw12345")
    with pytest.raises(Unauthorized, match="verify"):
        await accounts.authenticate("jack", "pw12345")


async def test_delete_account_cascades_to_messages(db, create_user):
    user, _ = await create_user(username="kate")
    other, _ = await create_user(username="liam")
    await inbox.submit("kate", "one")
    await inbox.submit("kate", "two")
    await inbox.submit("liam", "keep me")

    await accounts.delete_account(user)
    assert not await User.exists(id=user.id)
    assert await Message.filter(user_id=user.id).count() == 0
    assert await Message.filter(user_id=other.id).count() == 1


async def test_storage_rejects_two_active_owners_of_one_name(db, create_user):
    from tortoise.exceptions import IntegrityError

    await create_user(username="solo")
    with pytest.raises(IntegrityError):
        await User.create(
            username="solo",
            email="solo2@x.com",
            password_hash="x",
            is_verified=True,
            active_username="solo",
        )


async def test_pending_records_may_share_a_name(db, outbox):
    await accounts.register("twin", "t1@x.com", "pw12345")
    await accounts.register("twin", "t2@x.com", "pw12345")
    assert await User.filter(username="twin", active_username=None).count() == 2


async def test_concurrent_verify_of_shared_name_has_one_winner(db, outbox, monkeypatch):
    await accounts.register("race", "r1@x.com", "pw12345")
    code_one = outbox.code_for("race")
    await accounts.register("race", "r2@x.com", "pw12345")
    code_two = outbox.code_for("race")
    if code_one == code_two:
        await User.filter(email="r1@x.com").update(verify_code="111111")
        code_one = "111111"

    await accounts.verify("race", code_two)

    # Both requests passed the "is the name free?" read before either committed
    async def nobody_active(username):
        return None

    monkeypatch.setattr(accounts, "active_user_by_username", nobody_active)
    with pytest.raises(Conflict, match="Username is already taken"):
        await accounts.verify("race", code_one)

    monkeypatch.undo()
    winner = await accounts.active_user_by_username("race")
    assert winner.email == "r2@x.com"
    assert await User.filter(username="race", is_verified=True).count() == 1


async def test_sign_up_email_is_stored_normalized(db, outbox):
    await accounts.register("mixed", "Mixed@Example.COM", "pw12345")
    user = await User.get(username="mixed")
    assert user.email == "Mixed@example.com"
    assert outbox[-1]["email"] == "Mixed@example.com"


async def test_authenticate_with_email_as_typed_at_sign_up(db, outbox):
    await accounts.register("typed", "Typed@Example.COM", "pw12345")
    await accounts.verify("typed", outbox.code_for("typed"))
    user = await accounts.authenticate("Typed@Example.COM", "pw12345")
    assert user.username == "typed"
