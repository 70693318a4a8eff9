"""Tests for AccountService with a mocked user repository."""

from unittest.mock import AsyncMock

import pytest

from notive.application.services.account_service import AccountService, is_valid_email
from notive.application.services.password_hasher import PasswordHasher
from notive.application.services.token_issuer import TokenIssuer
from notive.domain.entities import ApiErrorCode, UserIdentity
from notive.domain.exceptions import (
    AuthenticationError,
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from notive.domain.ports import IUserRepository
from tests.helpers import OTHER_SECRET, FakeClock

ALICE = UserIdentity(id=1, name="Alice", email="alice@example.com")


@pytest.fixture
def users() -> AsyncMock:
    repo = AsyncMock(spec=IUserRepository)
    repo.email_taken.return_value = False
    repo.add.return_value = ALICE
    repo.get_by_id.return_value = ALICE
    repo.get_by_email.return_value = None
    repo.get_password_hash.return_value = None
    return repo


@pytest.fixture
def service(
    users: AsyncMock, token_issuer: TokenIssuer, password_hasher: PasswordHasher
) -> AccountService:
    return AccountService(users=users, issuer=token_issuer, hasher=password_hasher)


@pytest.mark.parametrize(
    ("email", "valid"),
    [
        ("alice@example.com", True),
        ("a.b+c@sub.example.org", True),
        ("alice@example", False),
        ("alice.example.com", False),
        ("al ice@example.com", False),
        ("", False),
    ],
)
def test_email_shape(email: str, valid: bool) -> None:
    assert is_valid_email(email) is valid


class TestRegister:
    """Validation order: missing fields, email, password, uniqueness."""

    async def test_success_issues_token(
        self, service: AccountService, users: AsyncMock, token_issuer: TokenIssuer
    ) -> None:
        result = await service.register("Alice", "alice@example.com", "secret1")

        assert result.user == ALICE
        assert token_issuer.validate(result.token).subject_id == ALICE.id
        stored_hash = users.add.await_args.kwargs["password_hash"]
        assert stored_hash != "secret1"
        assert stored_hash.startswith("$2")

    @pytest.mark.parametrize(
        ("name", "email", "password"),
        [
            (None, "alice@example.com", "secret1"),
            ("Alice", "", "secret1"),
            ("Alice", "alice@example.com", None),
        ],
    )
    async def test_missing_fields(
        self, service: AccountService, name: str | None, email: str | None, password: str | None
    ) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.register(name, email, password)
        assert exc_info.value.code == ApiErrorCode.MISSING_FIELDS

    async def test_invalid_email_checked_before_password(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.register("Alice", "not-an-email", "1")
        assert exc_info.value.code == ApiErrorCode.INVALID_EMAIL

    async def test_short_password(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.register("Alice", "alice@example.com", "12345")
        assert exc_info.value.code == ApiErrorCode.WEAK_PASSWORD

    async def test_password_over_bcrypt_limit(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.register("Alice", "alice@example.com", "x" * 73)
        assert exc_info.value.code == ApiErrorCode.WEAK_PASSWORD

    async def test_duplicate_email(self, service: AccountService, users: AsyncMock) -> None:
        users.email_taken.return_value = True

        with pytest.raises(DuplicateEntityException) as exc_info:
            await service.register("Alice", "alice@example.com", "secret1")

        assert exc_info.value.code == ApiErrorCode.EMAIL_EXISTS
        users.add.assert_not_awaited()


class TestLogin:
    """Unknown email and wrong password must be indistinguishable."""

    @pytest.fixture
    async def registered(self, users: AsyncMock, password_hasher: PasswordHasher) -> None:
        users.get_by_email.return_value = ALICE
        users.get_password_hash.return_value = await password_hasher.hash("secret1")

    async def test_success(self, service: AccountService, registered: None) -> None:
        result = await service.login("alice@example.com", "secret1")
        assert result.user == ALICE

    async def test_wrong_password(self, service: AccountService, registered: None) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await service.login("alice@example.com", "wrong-password")
        assert exc_info.value.code == ApiErrorCode.INVALID_CREDENTIALS

    async def test_unknown_email_same_error(self, service: AccountService) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await service.login("nobody@example.com", "secret1")
        assert exc_info.value.code == ApiErrorCode.INVALID_CREDENTIALS
        assert exc_info.value.message == "Invalid credentials"

    async def test_missing_credentials(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.login("alice@example.com", "")
        assert exc_info.value.code == ApiErrorCode.MISSING_CREDENTIALS

    async def test_invalid_email(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.login("alice", "secret1")
        assert exc_info.value.code == ApiErrorCode.INVALID_EMAIL


class TestRefresh:
    """Refresh accepts expired tokens but nothing forged or orphaned."""

    async def test_expired_token_is_exchanged(
        self, service: AccountService, token_issuer: TokenIssuer, clock: FakeClock
    ) -> None:
        old_token = token_issuer.issue(ALICE)
        clock.advance(days=8)

        result = await service.refresh(old_token)

        assert result.token != old_token
        assert token_issuer.validate(result.token).subject_id == ALICE.id
        assert result.user == ALICE

    async def test_no_token(self, service: AccountService) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(None)
        assert exc_info.value.code == ApiErrorCode.NO_TOKEN

    async def test_forged_token(self, service: AccountService, clock: FakeClock) -> None:
        forged = TokenIssuer(OTHER_SECRET, clock=clock).issue(ALICE)

        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(forged)
        assert exc_info.value.code == ApiErrorCode.INVALID_TOKEN

    async def test_deleted_user(
        self, service: AccountService, users: AsyncMock, token_issuer: TokenIssuer
    ) -> None:
        token = token_issuer.issue(ALICE)
        users.get_by_id.return_value = None

        with pytest.raises(AuthenticationError) as exc_info:
            await service.refresh(token)
        assert exc_info.value.code == ApiErrorCode.USER_NOT_FOUND


class TestProfile:
    async def test_get_profile_missing_user(
        self, service: AccountService, users: AsyncMock
    ) -> None:
        users.get_by_id.return_value = None
        with pytest.raises(EntityNotFoundException):
            await service.get_profile(1)

    async def test_update_profile(self, service: AccountService, users: AsyncMock) -> None:
        updated = UserIdentity(id=1, name="Alicia", email="alicia@example.com")
        users.update_profile.return_value = updated

        assert await service.update_profile(1, "Alicia", "alicia@example.com") == updated
        users.email_taken.assert_awaited_once_with("alicia@example.com", exclude_user_id=1)

    async def test_update_profile_email_in_use(
        self, service: AccountService, users: AsyncMock
    ) -> None:
        users.email_taken.return_value = True
        with pytest.raises(DuplicateEntityException) as exc_info:
            await service.update_profile(1, "Alice", "bob@example.com")
        assert exc_info.value.code == ApiErrorCode.EMAIL_EXISTS

    async def test_update_profile_requires_both_fields(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.update_profile(1, "Alice", None)
        assert exc_info.value.code == ApiErrorCode.MISSING_FIELDS


class TestChangePassword:
    async def test_success(
        self, service: AccountService, users: AsyncMock, password_hasher: PasswordHasher
    ) -> None:
        users.get_password_hash.return_value = await password_hasher.hash("secret1")

        await service.change_password(1, "secret1", "secret2")

        user_id, new_hash = users.update_password.await_args.args
        assert user_id == 1
        assert await password_hasher.verify("secret2", new_hash)

    async def test_wrong_old_password(
        self, service: AccountService, users: AsyncMock, password_hasher: PasswordHasher
    ) -> None:
        users.get_password_hash.return_value = await password_hasher.hash("secret1")

        with pytest.raises(AuthenticationError) as exc_info:
            await service.change_password(1, "nope-nope", "secret2")

        assert exc_info.value.code == ApiErrorCode.INVALID_CREDENTIALS
        users.update_password.assert_not_awaited()

    async def test_weak_new_password(self, service: AccountService) -> None:
        with pytest.raises(ValidationException) as exc_info:
            await service.change_password(1, "secret1", "123")
        assert exc_info.value.code == ApiErrorCode.WEAK_PASSWORD
