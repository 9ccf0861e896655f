"""Shared API dependencies for key and admin authentication."""

from typing import Annotated

from fastapi import Depends, Header, Path, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from gatecha.core.errors import ForbiddenError, NotFoundError, UnauthorizedError
from gatecha.core.security import KEY_ID_PREFIX
from gatecha.db.session import get_db
from gatecha.models import APIKey
from gatecha.services.challenge import ChallengeIssuer, get_challenge_issuer
from gatecha.services.credentials import CredentialManager, get_credential_manager
from gatecha.services.domain import is_origin_allowed
from gatecha.services.keys import KeyRegistry, get_key_registry
from gatecha.services.settings_store import SettingsStore, get_settings_store
from gatecha.services.stats import UsageAccountant, get_usage_accountant
from gatecha.services.verification import VerificationGate, get_verification_gate

BEARER_PREFIX = "Bearer "
# Largest value a signed 64-bit INTEGER column holds
SQL_INT_MAX = 2**63 - 1

# Missing credentials are reported by the dependency itself, not by HTTPBearer.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

# Internal key id taken from the URL path
KeyIdPath = Annotated[int, Path(ge=-SQL_INT_MAX, le=SQL_INT_MAX)]


def get_key_registry_dep(db: SessionDep) -> KeyRegistry:
    return get_key_registry(db)


def get_challenge_issuer_dep(db: SessionDep) -> ChallengeIssuer:
    return get_challenge_issuer(db)


def get_verification_gate_dep(db: SessionDep) -> VerificationGate:
    return get_verification_gate(db)


def get_usage_accountant_dep(db: SessionDep) -> UsageAccountant:
    return get_usage_accountant(db)


def get_settings_store_dep(db: SessionDep) -> SettingsStore:
    return get_settings_store(db)


def get_credential_manager_dep(db: SessionDep) -> CredentialManager:
    return get_credential_manager(db)


# Type aliases for service dependencies
KeyRegistryDep = Annotated[KeyRegistry, Depends(get_key_registry_dep)]
ChallengeIssuerDep = Annotated[ChallengeIssuer, Depends(get_challenge_issuer_dep)]
VerificationGateDep = Annotated[VerificationGate, Depends(get_verification_gate_dep)]
UsageAccountantDep = Annotated[UsageAccountant, Depends(get_usage_accountant_dep)]
SettingsStoreDep = Annotated[SettingsStore, Depends(get_settings_store_dep)]
CredentialManagerDep = Annotated[CredentialManager, Depends(get_credential_manager_dep)]


def _extract_key_id(query_key: str | None, authorization: str | None) -> str:
    if query_key:
        return query_key
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip()
    return ""


def get_api_key(
    registry: KeyRegistryDep,
    api_key: Annotated[str | None, Query(alias="apiKey")] = None,
    authorization: Annotated[str | None, Header()] = None,
    origin: Annotated[str | None, Header()] = None,
    referer: Annotated[str | None, Header()] = None,
) -> APIKey:
    """Resolve the API key of a public request and enforce its policy.

    The key id comes from the ``apiKey`` query parameter, falling back to an
    ``Authorization: Bearer gk_...`` header.

    Raises:
        UnauthorizedError: If the key id is missing, malformed or unknown.
        ForbiddenError: If the key is disabled or the Origin is not allowed.
    """
    key_id = _extract_key_id(api_key, authorization)
    if not key_id.startswith(KEY_ID_PREFIX):
        raise UnauthorizedError("missing or invalid API key")

    try:
        key = registry.get_by_key_id(key_id)
    except NotFoundError as err:
        raise UnauthorizedError("invalid API key") from err

    if not key.enabled:
        raise ForbiddenError("API key is disabled")
    if not is_origin_allowed(key.domain, origin, referer):
        raise ForbiddenError("domain not allowed")
    return key


def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    manager: CredentialManagerDep,
) -> str:
    """Return the username carried by a valid admin session token.

    Raises:
        UnauthorizedError: If the header is missing or the token is invalid.
    """
    if credentials is None:
        raise UnauthorizedError("missing authorization")
    claims = manager.validate_session(credentials.credentials)
    return claims["sub"]


# Type aliases for key and admin dependencies
APIKeyDep = Annotated[APIKey, Depends(get_api_key)]
CurrentAdminDep = Annotated[str, Depends(get_current_admin)]
