"""Unit tests for IdentityService."""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sessionvault.errors import AuthenticationError, ConflictError, InternalError
from sessionvault.kernel.identity.identity_service import LOGIN_FAILED, IdentityService
from sessionvault.kernel.identity.password import PasswordHasher
from sessionvault.kernel.models.user import User, UserRole
from tests.helpers import TEST_PASSWORD


class CountingHasher(PasswordHasher):
    """Records every bcrypt check it performs."""

    def __init__(self):
        super().__init__(rounds=4)
        self.checks = 0

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        self.checks += 1
        return super().verify(plain_password, hashed_password)


@pytest.fixture
def service(db_session: AsyncSession, hasher: PasswordHasher) -> IdentityService:
    return IdentityService(db_session, hasher)


class TestRegisterUser:
    """Tests for IdentityService.register_user."""

    async def test_register_creates_player(self, service: IdentityService, db_session: AsyncSession):
        user = await service.register_user(
            username="new_player",
            email="new@example.com",
            password=TEST_PASSWORD,
            display_name="New Player",
            date_of_birth=date(2000, 1, 1),
        )
        await db_session.commit()

        assert user.id is not None
        assert user.role == UserRole.PLAYER
        assert user.password_hash != TEST_PASSWORD

    async def test_duplicate_email(self, service: IdentityService, test_user: User):
        with pytest.raises(ConflictError) as exc_info:
            await service.register_user(
                username="someone_else",
                email=test_user.email,
                password=TEST_PASSWORD,
                display_name="Someone Else",
                date_of_birth=date(2000, 1, 1),
            )

        assert exc_info.value.field == "email"
        assert exc_info.value.message == "Failed to register, email already used"

    async def test_duplicate_username(self, service: IdentityService, test_user: User):
        with pytest.raises(ConflictError) as exc_info:
            await service.register_user(
                username=test_user.username,
                email="someone@example.com",
                password=TEST_PASSWORD,
                display_name="Someone Else",
                date_of_birth=date(2000, 1, 1),
            )

        assert exc_info.value.message == "Failed to register, username already used"


class TestAuthenticate:
    """Tests for IdentityService.authenticate."""

    async def test_by_email(self, service: IdentityService, test_user: User):
        user = await service.authenticate("player@example.com", TEST_PASSWORD)
        assert user.id == test_user.id

    async def test_by_username(self, service: IdentityService, test_user: User):
        user = await service.authenticate("player_one", TEST_PASSWORD)
        assert user.id == test_user.id

    async def test_wrong_password_and_unknown_user_look_alike(
        self, service: IdentityService, test_user: User
    ):
        with pytest.raises(AuthenticationError) as wrong_password:
            await service.authenticate("player_one", "Wr0ng!Pass")
        with pytest.raises(AuthenticationError) as unknown_user:
            await service.authenticate("nobody", TEST_PASSWORD)

        for exc_info in (wrong_password, unknown_user):
            assert exc_info.value.status_code == 404
            assert exc_info.value.message == LOGIN_FAILED

    async def test_unknown_user_costs_a_bcrypt_check(
        self, db_session: AsyncSession, test_user: User
    ):
        """Unknown and known accounts both pay for one password check."""
        hasher = CountingHasher()
        service = IdentityService(db_session, hasher)

        with pytest.raises(AuthenticationError):
            await service.authenticate("nobody", TEST_PASSWORD)
        assert hasher.checks == 1

        with pytest.raises(AuthenticationError):
            await service.authenticate("player_one", "Wr0ng!Pass")
        assert hasher.checks == 2

    async def test_unusable_stored_hash_is_internal(
        self, service: IdentityService, db_session: AsyncSession, test_user: User
    ):
        test_user.password_hash = "not-a-bcrypt-hash"
        await db_session.commit()

        with pytest.raises(InternalError) as exc_info:
            await service.authenticate("player_one", TEST_PASSWORD)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == LOGIN_FAILED


class TestLookup:
    """Tests for user lookups."""

    async def test_get_user_by_id(self, service: IdentityService, test_user: User):
        assert (await service.get_user_by_id(test_user.id)).username == "player_one"
        assert await service.get_user_by_id(test_user.id + 1000) is None
