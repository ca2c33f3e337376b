"""User models for authentication and database storage."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

PASSWORD_MAX_BYTES = 72


class UserCreate(BaseModel):
    """Schema for user registration."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        """Emails are unique case-insensitively, so they are stored lowercased."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v):
        """bcrypt only accepts up to 72 bytes of input."""
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"must be at most {PASSWORD_MAX_BYTES} bytes")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""

    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserInDB(BaseModel):
    """Schema for user stored in database, secrets included only when requested."""

    id: str
    name: str
    email: str
    password_hash: Optional[str] = None
    refresh_token_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: dict) -> "UserInDB":
        """Build from a raw Mongo document."""
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            email=doc.get("email", ""),
            password_hash=doc.get("password_hash"),
            refresh_token_hash=doc.get("refresh_token_hash"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def public(self) -> "UserResponse":
        """Non-secret projection returned to clients."""
        return UserResponse(id=self.id, name=self.name, email=self.email)


class UserResponse(BaseModel):
    """Schema for user response (without sensitive data)."""

    id: str
    name: str
    email: str


class AuthData(BaseModel):
    """Payload of register and login responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user: UserResponse
    access_token: str


class AccessTokenData(BaseModel):
    """Payload of the refresh response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str


class ProfileData(BaseModel):
    """Payload of the profile response."""

    user: UserResponse


class TokenData(BaseModel):
    """Schema for decoded token data."""

    user_id: str
