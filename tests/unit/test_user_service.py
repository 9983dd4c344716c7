"""Unit tests for UserService and password hashing."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateEmail
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.services.user_service import UserService


def _user(password: str = "Secret123!") -> User:
    return User(
        name="Owner",
        email="owner@example.com",
        hashed_password=get_password_hash(password, rounds=4),
    )


def test_password_hash_roundtrip():
    hashed = get_password_hash("Secret123!", rounds=4)
    assert hashed != "Secret123!"
    assert verify_password("Secret123!", hashed)
    assert not verify_password("secret123!", hashed)


def test_password_hash_is_salted():
    assert get_password_hash("same", rounds=4) != get_password_hash("same", rounds=4)


def test_long_passwords_are_truncated_at_bcrypt_limit():
    hashed = get_password_hash("x" * 100, rounds=4)
    assert verify_password("x" * 72, hashed)


def test_malformed_hash_does_not_verify():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


@pytest.mark.asyncio
async def test_create_user_hashes_password():
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()

    with patch("app.services.user_service.UserService.get_user_by_email", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = None
        with patch("app.services.user_service.get_password_hash", return_value="hashed") as mock_hash:
            user = await UserService.create_user(db, name=" Owner ", email="Owner@Example.com", password="pw")

    mock_hash.assert_called_once_with("pw")
    assert user.hashed_password == "hashed"
    assert user.email == "owner@example.com"
    assert user.name == "Owner"
    assert db.commit.called


@pytest.mark.asyncio
async def test_create_user_duplicate_email():
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()

    with patch("app.services.user_service.UserService.get_user_by_email", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = _user()
        with pytest.raises(DuplicateEmail):
            await UserService.create_user(db, name="Owner", email="owner@example.com", password="pw")

    assert not db.add.called


@pytest.mark.asyncio
async def test_authenticate_user_success():
    db = AsyncMock(spec=AsyncSession)
    user = _user("Secret123!")

    with patch("app.services.user_service.UserService.get_user_by_email", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = user
        assert await UserService.authenticate_user(db, "owner@example.com", "Secret123!") is user


@pytest.mark.asyncio
async def test_authenticate_user_wrong_password_and_unknown_email_look_the_same():
    db = AsyncMock(spec=AsyncSession)

    with patch("app.services.user_service.UserService.get_user_by_email", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = _user("Secret123!")
        wrong_password = await UserService.authenticate_user(db, "owner@example.com", "nope")

        mock_get.return_value = None
        unknown_email = await UserService.authenticate_user(db, "ghost@example.com", "Secret123!")

    assert wrong_password is None
    assert unknown_email is None
