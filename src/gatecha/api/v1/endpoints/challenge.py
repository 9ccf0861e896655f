# src/gatecha/api/v1/endpoints/challenge.py
"""Public, key-authenticated challenge and verification endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from gatecha.api.v1.dependencies import APIKeyDep, ChallengeIssuerDep, VerificationGateDep
from gatecha.schemas.challenge import ChallengeResponse, VerifyRequest, VerifyResponse

router = APIRouter(tags=["challenge"])


@router.get("/challenge", response_model=ChallengeResponse)
async def get_challenge(key: APIKeyDep, issuer: ChallengeIssuerDep) -> ChallengeResponse:
    """Issue a challenge signed with the caller's key.

    Returns:
        The challenge envelope; the key secret is never included.
    """
    challenge = issuer.issue(key)
    return ChallengeResponse(**challenge.to_dict())


@router.post(
    "/verify",
    response_model=VerifyResponse,
    response_model_exclude_none=True,
    responses={status.HTTP_400_BAD_REQUEST: {"model": VerifyResponse}},
)
async def verify_solution(
    body: VerifyRequest, key: APIKeyDep, gate: VerificationGateDep
) -> VerifyResponse | JSONResponse:
    """Verify a solved challenge and redeem it.

    Rejected solutions still answer 200; the reason is carried in ``error``.
    """
    if not body.payload:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": "missing payload"},
        )

    outcome = gate.verify(key, body.payload)
    return VerifyResponse(ok=outcome.ok, error=outcome.error)
