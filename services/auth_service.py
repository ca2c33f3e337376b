"""
Authentication flow: register, login, refresh rotation and logout.

Session state per user is a single stored refresh token:

    register/login  -> issue pair, store refresh token      [none  -> issued]
    refresh         -> swap stored token for a new one      [issued -> issued]
    logout          -> clear stored token                   [issued -> none]

A refresh token is only honoured while it is the one currently stored, so a
rotation or logout invalidates every older refresh token for that user.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config.logging_utils import log_event
from models.user import UserInDB, UserResponse
from services.errors import (
    InvalidCredentialsError,
    InvalidTokenError,
    TaskFlowError,
    UnauthenticatedError,
    ValidationError,
)
from services.token_service import TokenService
from services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    """Result of a successful register or login."""

    user: UserResponse
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class RefreshedTokens:
    """Result of a successful refresh rotation."""

    access_token: str
    refresh_token: str


class AuthService:
    """Orchestrates the credential store and token issuer."""

    def __init__(self, users: UserStore, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    async def _start_session(self, user: UserInDB) -> AuthSession:
        """Issue a fresh pair and make its refresh token the user's current one."""
        access_token, refresh_token = self._tokens.issue_pair(user.id)
        await self._users.set_refresh_token(user.id, refresh_token)
        return AuthSession(
            user=user.public(),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def register(self, name: str, email: str, password: str) -> AuthSession:
        """
        Create an account and start its first session.

        Raises:
            ValidationError: a field is missing or invalid
            DuplicateEmailError: the email is already registered
        """
        if not name or not email or not password:
            raise ValidationError("Please provide name, email, and password")

        user = await self._users.create_user(name, email, password)
        session = await self._start_session(user)
        log_event("user_registered", user_id=user.id)
        return session

    async def login(self, email: str, password: str) -> AuthSession:
        """
        Verify credentials and start a new session, replacing any previous one.

        Raises:
            ValidationError: email or password missing
            InvalidCredentialsError: unknown email or wrong password
        """
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = await self._users.find_by_email(email, include_secrets=True)
        if not await self._users.check_password(user, password):
            log_event("login_failed", level=logging.WARNING)
            raise InvalidCredentialsError()

        session = await self._start_session(user)
        log_event("login_succeeded", user_id=user.id)
        return session

    async def refresh(self, refresh_token: Optional[str]) -> RefreshedTokens:
        """
        Exchange the current refresh token for a brand-new pair.

        Raises:
            UnauthenticatedError: no refresh token presented
            InvalidTokenError: bad signature, expired, or not the stored token
        """
        if not refresh_token:
            raise UnauthenticatedError("No refresh token provided")

        try:
            token_data = self._tokens.verify(refresh_token, "refresh")
        except TaskFlowError as e:
            raise InvalidTokenError("Invalid or expired refresh token") from e

        access_token, new_refresh_token = self._tokens.issue_pair(token_data.user_id)
        rotated = await self._users.rotate_refresh_token(
            token_data.user_id, refresh_token, new_refresh_token
        )
        if not rotated:
            log_event("refresh_rejected", level=logging.WARNING, user_id=token_data.user_id)
            raise InvalidTokenError("Invalid refresh token")

        log_event("refresh_rotated", user_id=token_data.user_id)
        return RefreshedTokens(access_token=access_token, refresh_token=new_refresh_token)

    async def logout(self, refresh_token: Optional[str]) -> None:
        """Best-effort: clear the stored refresh token if the presented one decodes."""
        if not refresh_token:
            return
        try:
            token_data = self._tokens.verify(refresh_token, "refresh")
        except TaskFlowError:
            log_event("logout_without_valid_token", level=logging.DEBUG)
            return

        await self._users.set_refresh_token(token_data.user_id, None)
        log_event("logged_out", user_id=token_data.user_id)

    async def authenticate(self, access_token: Optional[str]) -> UserInDB:
        """
        Resolve an access token to a live user (secrets excluded).

        Raises:
            UnauthenticatedError: no token, or the user no longer exists
            TokenExpiredError: the token has expired
            InvalidTokenError: the token is malformed or badly signed
        """
        if not access_token:
            raise UnauthenticatedError()

        token_data = self._tokens.verify(access_token, "access")
        user = await self._users.find_by_id(token_data.user_id)
        if user is None:
            raise UnauthenticatedError("User not found. Token is invalid.")
        return user

    @staticmethod
    def get_profile(user: UserInDB) -> UserResponse:
        """Non-secret projection of an already-resolved identity."""
        return user.public()
