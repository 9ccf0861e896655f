# src/gatecha/api/v1/endpoints/keys.py
"""API key management for the authenticated admin."""

from __future__ import annotations

from fastapi import APIRouter, status

from gatecha.api.v1.dependencies import CurrentAdminDep, KeyIdPath, KeyRegistryDep
from gatecha.schemas.api_key import (
    APIKeyCreate,
    APIKeyList,
    APIKeyResponse,
    APIKeyUpdate,
    RotateSecretResponse,
    StatusResponse,
)
from gatecha.services.keys import KeyPatch

router = APIRouter(prefix="/keys", tags=["keys"])


@router.get("", response_model=APIKeyList)
async def list_keys(_: CurrentAdminDep, registry: KeyRegistryDep) -> APIKeyList:
    keys = registry.list_all()
    return APIKeyList(keys=[APIKeyResponse.model_validate(key) for key in keys])


@router.post("", response_model=APIKeyResponse, status_code=status.HTTP_201_CREATED)
async def create_key(
    body: APIKeyCreate, _: CurrentAdminDep, registry: KeyRegistryDep
) -> APIKeyResponse:
    """Create a key. Missing or non-positive limits take the default policy."""
    key = registry.create(
        name=body.name,
        domain=body.domain,
        max_number=body.max_number,
        expire_seconds=body.expire_seconds,
        algorithm=body.algorithm,
    )
    return APIKeyResponse.model_validate(key)


@router.get("/{key_id}", response_model=APIKeyResponse)
async def get_key(
    key_id: KeyIdPath, _: CurrentAdminDep, registry: KeyRegistryDep
) -> APIKeyResponse:
    return APIKeyResponse.model_validate(registry.get(key_id))


@router.put("/{key_id}", response_model=APIKeyResponse)
async def update_key(
    key_id: KeyIdPath, body: APIKeyUpdate, _: CurrentAdminDep, registry: KeyRegistryDep
) -> APIKeyResponse:
    """Apply a partial update; fields not sent keep their current value."""
    patch = KeyPatch(**body.model_dump(exclude_unset=True))
    return APIKeyResponse.model_validate(registry.update(key_id, patch))


@router.delete("/{key_id}", response_model=StatusResponse)
async def delete_key(
    key_id: KeyIdPath, _: CurrentAdminDep, registry: KeyRegistryDep
) -> StatusResponse:
    """Delete a key with its ledger and stats rows. Unknown ids succeed too."""
    registry.delete(key_id)
    return StatusResponse(status="deleted")


@router.post("/{key_id}/rotate-secret", response_model=RotateSecretResponse)
async def rotate_secret(
    key_id: KeyIdPath, _: CurrentAdminDep, registry: KeyRegistryDep
) -> RotateSecretResponse:
    return RotateSecretResponse(hmac_secret=registry.rotate_secret(key_id))
