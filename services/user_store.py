"""
Credential Store

Persists user records in the ``users`` collection. Passwords only ever enter
the store through the explicit hashing step, and the two secret fields
(password hash, current refresh token digest) are projected out of every read
unless the caller asks for them.
"""

import asyncio
import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

import bcrypt
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError

from models.user import PASSWORD_MAX_BYTES, UserCreate, UserInDB
from services.errors import DuplicateEmailError, ValidationError
from services.object_ids import parse_object_id, validation_message

logger = logging.getLogger(__name__)

SECRET_FIELDS = ("password_hash", "refresh_token_hash")
_PUBLIC_PROJECTION = {field: 0 for field in SECRET_FIELDS}


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password using bcrypt with a fresh random salt."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8'),
        )
    except ValueError:
        # bcrypt rejects over-long input and corrupt hashes.
        return False


def hash_token(token: str) -> str:
    """SHA-256 digest under which a refresh token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserStore:
    """Repository for user records and their credentials."""

    COLLECTION_NAME = "users"

    def __init__(self, collection, bcrypt_rounds: int = 10):
        """
        Args:
            collection: Motor collection (or compatible) holding users
            bcrypt_rounds: bcrypt work factor for new hashes
        """
        self._collection = collection
        self._rounds = bcrypt_rounds
        self._dummy_hash: Optional[str] = None

    async def ensure_indexes(self) -> None:
        """Create unique index on email field for fast lookups."""
        await self._collection.create_index("email", unique=True)

    async def hash_password(self, password: str) -> str:
        """Run the bcrypt hash off the event loop."""
        return await asyncio.to_thread(hash_password, password, self._rounds)

    async def create_user(self, name: str, email: str, password: str) -> UserInDB:
        """
        Create a user after validating the fields and hashing the password.

        Returns:
            The stored user without secrets

        Raises:
            ValidationError: a field breaks its rule
            DuplicateEmailError: the email (case-insensitive) is taken
        """
        try:
            data = UserCreate(name=name, email=email, password=password)
        except PydanticValidationError as e:
            raise ValidationError(validation_message(e)) from e

        if await self._collection.find_one({"email": data.email}, {"_id": 1}):
            raise DuplicateEmailError()

        now = _now()
        user_doc = {
            "name": data.name,
            "email": data.email,
            "password_hash": await self.hash_password(data.password),
            "refresh_token_hash": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self._collection.insert_one(user_doc)
        except DuplicateKeyError as e:
            raise DuplicateEmailError() from e

        logger.info("Created user id=%s", result.inserted_id)
        return UserInDB(
            id=str(result.inserted_id),
            name=data.name,
            email=data.email,
            created_at=now,
            updated_at=now,
        )

    async def find_by_email(self, email: str, include_secrets: bool = False) -> Optional[UserInDB]:
        """Get a user by email; the lookup is case-insensitive."""
        key = (email or "").strip().lower()
        if not key:
            return None
        projection = None if include_secrets else _PUBLIC_PROJECTION
        doc = await self._collection.find_one({"email": key}, projection)
        return UserInDB.from_document(doc) if doc else None

    async def find_by_id(self, user_id: str, include_secrets: bool = False) -> Optional[UserInDB]:
        """Get a user by id; malformed ids simply find nothing."""
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        projection = None if include_secrets else _PUBLIC_PROJECTION
        doc = await self._collection.find_one({"_id": oid}, projection)
        return UserInDB.from_document(doc) if doc else None

    async def set_password(self, user_id: str, password: str) -> bool:
        """Replace the stored hash with one of the new plaintext password."""
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        if not 6 <= len(password or "") <= 72:
            raise ValidationError("password: must be 6 to 72 characters")
        if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValidationError(f"password: must be at most {PASSWORD_MAX_BYTES} bytes")
        result = await self._collection.update_one(
            {"_id": oid},
            {"$set": {"password_hash": await self.hash_password(password), "updated_at": _now()}}
        )
        return result.matched_count == 1

    async def check_password(self, user: Optional[UserInDB], password: str) -> bool:
        """
        Compare a plaintext password with the user's stored hash.

        A missing user is compared against a throwaway hash so both failure
        paths cost the same bcrypt work.
        """
        if user is None or not user.password_hash:
            if self._dummy_hash is None:
                self._dummy_hash = await self.hash_password("taskflow-dummy-password")
            await asyncio.to_thread(verify_password, password, self._dummy_hash)
            return False
        return await asyncio.to_thread(verify_password, password, user.password_hash)

    async def set_refresh_token(self, user_id: str, token: Optional[str]) -> bool:
        """Store the user's single current refresh token, or clear it with None."""
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        result = await self._collection.update_one(
            {"_id": oid},
            {"$set": {
                "refresh_token_hash": hash_token(token) if token else None,
                "updated_at": _now(),
            }}
        )
        return result.matched_count == 1

    async def rotate_refresh_token(self, user_id: str, expected: str, new_token: str) -> bool:
        """
        Atomically swap the stored refresh token, only if it is still ``expected``.

        Returns:
            False when the stored token differs (already rotated or logged out)
            or the user no longer exists
        """
        oid = parse_object_id(user_id)
        if oid is None:
            return False
        result = await self._collection.update_one(
            {"_id": oid, "refresh_token_hash": hash_token(expected)},
            {"$set": {"refresh_token_hash": hash_token(new_token), "updated_at": _now()}}
        )
        return result.modified_count == 1
