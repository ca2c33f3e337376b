"""
Token Issuer

Signs and verifies the two JWT kinds. Access and refresh tokens use distinct
secrets and lifetimes, so a leaked secret for one kind cannot mint the other.
The only claim trusted for authorization is ``sub`` (the user id).
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from config.settings import Settings
from models.user import TokenData
from services.errors import InvalidTokenError, TokenExpiredError

TokenKind = Literal["access", "refresh"]


class TokenService:
    """Issues and validates signed access and refresh tokens."""

    def __init__(self, config: Settings):
        self._algorithm = config.JWT_ALGORITHM
        self._secrets = {
            "access": config.JWT_ACCESS_SECRET,
            "refresh": config.JWT_REFRESH_SECRET,
        }
        self._lifetimes = {
            "access": timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
            "refresh": timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
        }

    def _issue(self, user_id: str, kind: TokenKind, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self._lifetimes[kind])
        to_encode = {
            "sub": str(user_id),
            "iat": now,
            "exp": expire,
            # Random id keeps two tokens minted in the same second distinct.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, self._secrets[kind], algorithm=self._algorithm)

    def issue_access_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a short-lived access token for the user."""
        return self._issue(user_id, "access", expires_delta)

    def issue_refresh_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Create a long-lived refresh token for the user."""
        return self._issue(user_id, "refresh", expires_delta)

    def issue_pair(self, user_id: str) -> tuple[str, str]:
        """Create a fresh (access, refresh) token pair."""
        return self.issue_access_token(user_id), self.issue_refresh_token(user_id)

    def verify(self, token: str, kind: TokenKind) -> TokenData:
        """
        Decode and validate a token of the given kind.

        Raises:
            TokenExpiredError: signature is valid but the token has expired
            InvalidTokenError: anything else (malformed, wrong secret, no subject)
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(token, self._secrets[kind], algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise InvalidTokenError() from e

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise InvalidTokenError()
        return TokenData(user_id=user_id)
