"""Schemas for the public challenge and verification endpoints."""

from pydantic import BaseModel, Field


class ChallengeResponse(BaseModel):
    """Challenge handed to a widget or client solver. Never carries the key secret."""

    algorithm: str
    challenge: str
    maxnumber: int
    salt: str
    signature: str


class VerifyRequest(BaseModel):
    payload: str | None = Field(None, description="Base64 encoded JSON solution")


class VerifyResponse(BaseModel):
    ok: bool
    error: str | None = None
