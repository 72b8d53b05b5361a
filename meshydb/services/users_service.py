"""
Users Service - Registration, verification and self-profile operations.

Public methods validate their arguments before returning the coroutine
that performs the call, so a missing argument raises ValidationError at
call time and nothing is sent. Self-profile calls on a service without an
authentication id fail the same way with AuthenticationError.
"""

import logging
from typing import Awaitable, Optional

from meshydb.domain.user import (
    AnonymousRegistration,
    ForgotPassword,
    PasswordUpdate,
    RegisterUser,
    ResetPassword,
    SecurityQuestionUpdate,
    User,
    UserVerificationCheck,
    UserVerificationHash,
)
from meshydb.errors import AuthenticationError, ClientError, ValidationError, VerificationError, require
from meshydb.ports.request_port import RequestPort

logger = logging.getLogger(__name__)


class UsersService:
    """
    Users service.

    Registration and verification calls work without an authentication id;
    the self-profile calls need one.
    """

    def __init__(self, request_service: RequestPort, auth_id: Optional[str] = None):
        self._requests = request_service
        self._auth_id = auth_id

    def _require_auth(self) -> str:
        if not self._auth_id:
            raise AuthenticationError("Operation requires an authenticated connection")
        return self._auth_id

    # Anonymous operations

    def create_user(self, new_user: RegisterUser) -> Awaitable[UserVerificationHash]:
        """
        Register a user.

        Returns:
            Verification hash for confirming the registration
        """
        require(new_user.username, "username", "field")
        require(new_user.new_password, "new_password", "field")
        return self._create_user(new_user)

    async def _create_user(self, new_user: RegisterUser) -> UserVerificationHash:
        data = await self._requests.post("users/register", new_user.to_dict())
        logger.info("Registered user %s", new_user.username)
        return UserVerificationHash.from_dict(data)

    def create_anonymous_user(self, registration: AnonymousRegistration) -> Awaitable[User]:
        """Register a throwaway anonymous identity."""
        require(registration.username, "username", "field")
        return self._create_anonymous_user(registration)

    async def _create_anonymous_user(self, registration: AnonymousRegistration) -> User:
        data = await self._requests.post("users/register/anonymous", registration.to_dict())
        return User.from_dict(data)

    def forgot_password(self, username: str, attempt: int = 1) -> Awaitable[UserVerificationHash]:
        """
        Request a password reset.

        Args:
            username: User to recover
            attempt: Attempt number; the server picks the hint from it

        Returns:
            Verification hash including a hint the user can recognize
        """
        require(username, "username")
        return self._forgot_password(ForgotPassword(username=username, attempt=attempt))

    async def _forgot_password(self, request: ForgotPassword) -> UserVerificationHash:
        data = await self._requests.post("users/forgotpassword", request.to_dict())
        return UserVerificationHash.from_dict(data)

    def reset_password(self, reset: ResetPassword) -> Awaitable[None]:
        """Set a new password using a verification hash and code."""
        require(reset.hash, "hash", "field")
        require(reset.verification_code, "verification_code", "field")
        require(reset.new_password, "new_password", "field")
        return self._verification_call("users/resetpassword", reset)

    def check_hash(self, check: UserVerificationCheck) -> Awaitable[bool]:
        """Check a verification hash/code pair without side effects."""
        require(check.hash, "hash", "field")
        require(check.verification_code, "verification_code", "field")
        return self._check_hash(check)

    async def _check_hash(self, check: UserVerificationCheck) -> bool:
        return bool(await self._requests.post("users/checkhash", check.to_dict()))

    def verify_user(self, check: UserVerificationCheck) -> Awaitable[None]:
        """Complete a pending verification (e.g. registration confirmation)."""
        require(check.hash, "hash", "field")
        require(check.verification_code, "verification_code", "field")
        return self._verification_call("users/verify", check)

    async def _verification_call(self, path: str, check: UserVerificationCheck) -> None:
        try:
            await self._requests.post(path, check.to_dict())
        except ClientError as exc:
            if exc.status_code in (400, 404):
                raise VerificationError(
                    exc.message, status_code=exc.status_code, detail=exc.detail, path=exc.path,
                ) from exc
            raise

    # Authenticated operations

    def get_self(self) -> Awaitable[User]:
        """Get the signed-in user's profile."""
        return self._get_self(self._require_auth())

    async def _get_self(self, auth_id: str) -> User:
        data = await self._requests.get("users/me", auth_id=auth_id)
        return User.from_dict(data)

    def update_self(self, user: User) -> Awaitable[User]:
        """Replace the signed-in user's profile."""
        auth_id = self._require_auth()
        require(user.username, "username", "field")
        return self._update_self(user, auth_id)

    async def _update_self(self, user: User, auth_id: str) -> User:
        data = await self._requests.put("users/me", user.to_dict(), auth_id=auth_id)
        return User.from_dict(data)

    def update_security_question(self, update: SecurityQuestionUpdate) -> Awaitable[None]:
        """Replace the stored security questions (answers hashed server-side)."""
        auth_id = self._require_auth()
        if not update.security_questions:
            raise ValidationError("Missing required field: security_questions")
        for question in update.security_questions:
            require(question.question, "question", "field")
            require(question.answer, "answer", "field")
        return self._update_security_question(update, auth_id)

    async def _update_security_question(self, update: SecurityQuestionUpdate, auth_id: str) -> None:
        await self._requests.post("users/me/questions", update.to_dict(), auth_id=auth_id)

    def update_password(self, previous_password: str, new_password: str) -> Awaitable[None]:
        auth_id = self._require_auth()
        require(previous_password, "previous_password")
        require(new_password, "new_password")
        return self._update_password(PasswordUpdate(previous_password, new_password), auth_id)

    async def _update_password(self, update: PasswordUpdate, auth_id: str) -> None:
        await self._requests.post("users/me/password", update.to_dict(), auth_id=auth_id)
