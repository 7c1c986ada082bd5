"""
NegotiateAI Backend - Auth & User Service Unit Tests
=====================================================

What we test:
    ✅ bcrypt hashing round trip and malformed hashes
    ✅ JWT issue / decode, expiry and tampering
    ✅ get_current_user for missing, valid and orphaned tokens
    ✅ Registration, login and profile update rules
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from negotiateai.exceptions import AuthenticationError, ValidationError
from negotiateai.schemas.user import LoginRequest, ProfileUpdateRequest, RegisterRequest
from negotiateai.security import (
    create_access_token,
    decode_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from negotiateai.services.user_service import UserService


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestPasswordHashing:

    def test_round_trip(self):
        hashed = hash_password("s3cret-pass")

        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong-pass", hashed) is False

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_overlong_password_rejected(self):
        with pytest.raises(ValidationError):
            hash_password("x" * 73)


class TestTokens:

    def test_payload(self, test_user):
        payload = decode_access_token(create_access_token(test_user))

        assert payload["sub"] == str(test_user.id)
        assert payload["email"] == test_user.email
        assert payload["role"] == "user"

    def test_expired_token_rejected(self, test_user):
        token = create_access_token(test_user, now=datetime.now(timezone.utc) - timedelta(days=40))

        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)

        assert exc_info.value.message == "Not authorized, token failed"

    def test_foreign_signature_rejected(self, test_user):
        forged = jwt.encode({"sub": str(test_user.id)}, "someone-elses-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            decode_access_token(forged)


class TestGetCurrentUser:

    @pytest.mark.asyncio
    async def test_no_credentials(self, mock_db_session):
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(credentials=None, db=mock_db_session)

        assert exc_info.value.message == "Not authorized, no token"

    @pytest.mark.asyncio
    async def test_valid_token(self, mock_db_session, test_user):
        mock_db_session.get.return_value = test_user

        user = await get_current_user(credentials=_bearer(create_access_token(test_user)), db=mock_db_session)

        assert user is test_user

    @pytest.mark.asyncio
    async def test_deleted_user(self, mock_db_session, test_user):
        mock_db_session.get.return_value = None

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user(credentials=_bearer(create_access_token(test_user)), db=mock_db_session)

        assert exc_info.value.message == "Not authorized, user not found"


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_register_lowercases_email(self, mock_db_session, query_result):
        mock_db_session.execute.return_value = query_result(scalar=None)

        user, token = await self.service.register(
            mock_db_session,
            RegisterRequest(name="Dana", email="Dana@Example.com", password="s3cret-pass"),
        )

        assert user.email == "dana@example.com"
        assert user.role == "user"
        assert decode_access_token(token)["sub"] == str(user.id)
        stored = mock_db_session.add.call_args.args[0]
        assert stored.password_hash != "s3cret-pass"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, mock_db_session, query_result, test_user):
        mock_db_session.execute.return_value = query_result(scalar=test_user)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(
                mock_db_session,
                RegisterRequest(name="Dana", email="dana@example.com", password="s3cret-pass"),
            )

        assert exc_info.value.message == "User already exists"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_success(self, mock_db_session, query_result, test_user):
        test_user.password_hash = hash_password("s3cret-pass")
        mock_db_session.execute.return_value = query_result(scalar=test_user)

        user, token = await self.service.login(
            mock_db_session, LoginRequest(email="DANA@example.com", password="s3cret-pass")
        )

        assert user.id == test_user.id
        assert token

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db_session, query_result, test_user):
        test_user.password_hash = hash_password("s3cret-pass")
        mock_db_session.execute.return_value = query_result(scalar=test_user)

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.login(mock_db_session, LoginRequest(email="dana@example.com", password="nope"))

        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, mock_db_session, query_result):
        mock_db_session.execute.return_value = query_result(scalar=None)

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.login(mock_db_session, LoginRequest(email="ghost@example.com", password="x"))

        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, mock_db_session, query_result, test_user, make_user):
        mock_db_session.get.return_value = test_user
        mock_db_session.execute.return_value = query_result(scalar=make_user(email="taken@example.com"))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_profile(
                mock_db_session, test_user.id, ProfileUpdateRequest(email="taken@example.com")
            )

        assert exc_info.value.message == "Email is already in use"
        assert test_user.email == "dana@example.com"

    @pytest.mark.asyncio
    async def test_update_name(self, mock_db_session, test_user):
        mock_db_session.get.return_value = test_user

        user, token = await self.service.update_profile(
            mock_db_session, test_user.id, ProfileUpdateRequest(name="  Dana R.  ")
        )

        assert user.name == "Dana R."
        assert token
        mock_db_session.execute.assert_not_called()
