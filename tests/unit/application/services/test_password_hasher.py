"""Tests for PasswordHasher."""

from notive.application.services.password_hasher import PasswordHasher


async def test_hash_and_verify(password_hasher: PasswordHasher) -> None:
    hashed = await password_hasher.hash("123456")

    assert hashed != "123456"
    assert hashed.startswith("$2")
    assert await password_hasher.verify("123456", hashed) is True
    assert await password_hasher.verify("654321", hashed) is False


async def test_same_password_gets_different_salt(password_hasher: PasswordHasher) -> None:
    assert await password_hasher.hash("123456") != await password_hasher.hash("123456")


async def test_unknown_account_never_verifies(password_hasher: PasswordHasher) -> None:
    assert await password_hasher.verify("notive-dummy-password", None) is False


async def test_non_bcrypt_stored_value(password_hasher: PasswordHasher) -> None:
    assert await password_hasher.verify("123456", "123456") is False
