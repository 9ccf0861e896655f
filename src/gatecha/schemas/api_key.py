"""API key schemas for the admin surface."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gatecha.core.settings import MAX_EXPIRE_SECONDS, MAX_MAX_NUMBER


class APIKeyResponse(BaseModel):
    """An API key as returned to the authenticated admin, secret included."""

    id: int
    key_id: str
    hmac_secret: str
    name: str
    domain: str
    max_number: int
    expire_seconds: int
    algorithm: str
    enabled: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class APIKeyList(BaseModel):
    keys: list[APIKeyResponse]


class APIKeyCreate(BaseModel):
    """Fields accepted when creating a key; non-positive numbers fall back to defaults."""

    name: str = Field("", description="Human readable label")
    domain: str = Field("", description="Hostname allowed to use the key; empty allows any")
    max_number: int | None = Field(
        None, le=MAX_MAX_NUMBER, description="Upper bound of the secret number"
    )
    expire_seconds: int | None = Field(
        None, le=MAX_EXPIRE_SECONDS, description="Challenge lifetime in seconds"
    )
    algorithm: str | None = Field(None, description="SHA-1, SHA-256 or SHA-512")


class APIKeyUpdate(BaseModel):
    """Partial update. Omitted or null fields are left unchanged.

    Empty strings and non-positive numbers are ignored as well; ``enabled``
    applies whenever it is sent.
    """

    name: str | None = None
    domain: str | None = None
    max_number: int | None = Field(None, le=MAX_MAX_NUMBER)
    expire_seconds: int | None = Field(None, le=MAX_EXPIRE_SECONDS)
    algorithm: str | None = None
    enabled: bool | None = None


class RotateSecretResponse(BaseModel):
    hmac_secret: str


class StatusResponse(BaseModel):
    status: str
