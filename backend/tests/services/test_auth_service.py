"""Auth Service - password hashing, login and token verification.

Tests cover:
    - Correct password -> token that authenticates back to the user
    - Wrong password / unknown email -> InvalidCredentialsError (same message)
    - Inactive user -> InactiveUserError on login, UnauthorizedError on token use
    - Expired, tampered and missing tokens -> UnauthorizedError
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.core.errors import InactiveUserError, InvalidCredentialsError, UnauthorizedError
from app.services.auth_service import AuthService, hash_password, verify_password

SECRET = "unit-test-secret-0123456789"


@pytest.fixture
def auth(repository):
    return AuthService(repository, SECRET, expires_minutes=5)


def test_long_passwords_hash_and_verify():
    password = "x" * 100
    assert verify_password(password, hash_password(password))


def test_verify_rejects_garbage_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


async def test_login_issues_token_and_records_login(auth, repository, make_user, password):
    user = await make_user()
    tokens = await auth.login("Member@Example.com ", password)
    assert tokens.token_type == "bearer"
    assert tokens.expires_in == 300
    assert user.last_login_at is not None
    assert repository.saves == 1
    assert (await auth.authenticate(tokens.access_token)).id == user.id


async def test_wrong_password_and_unknown_email_look_the_same(auth, make_user, password):
    await make_user()
    with pytest.raises(InvalidCredentialsError) as wrong:
        await auth.login("member@example.com", "not-the-password")
    with pytest.raises(InvalidCredentialsError) as unknown:
        await auth.login("nobody@example.com", password)
    assert wrong.value.message == unknown.value.message


async def test_inactive_user_cannot_log_in(auth, make_user, password):
    await make_user(is_active=False)
    with pytest.raises(InactiveUserError):
        await auth.login("member@example.com", password)


async def test_token_of_deactivated_user_rejected(auth, make_user):
    user = await make_user()
    token = auth.issue_token(user).access_token
    user.is_active = False
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(token)


async def test_expired_token_rejected(auth, make_user):
    user = await make_user()
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode(
        {"sub": str(user.id), "iat": past, "exp": past + timedelta(minutes=1)},
        SECRET, algorithm="HS256",
    )
    with pytest.raises(UnauthorizedError) as info:
        await auth.authenticate(token)
    assert info.value.message == "Token expired"


async def test_token_signed_with_other_secret_rejected(auth, make_user):
    user = await make_user()
    forged = AuthService(auth.repository, "another-secret-abcdefghij").issue_token(user)
    with pytest.raises(UnauthorizedError) as info:
        await auth.authenticate(forged.access_token)
    assert info.value.message == "Invalid token"


@pytest.mark.parametrize("token", [None, ""])
async def test_missing_token_rejected(auth, token):
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(token)


async def test_token_with_bad_subject_rejected(auth):
    token = jwt.encode({"sub": "not-a-uuid"}, SECRET, algorithm="HS256")
    with pytest.raises(UnauthorizedError):
        await auth.authenticate(token)
