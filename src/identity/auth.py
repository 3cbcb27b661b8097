"""Bearer token verification against the identity provider.

Tokens are RS256 JWTs issued by Auth0; signing keys come from the tenant's
JWKS endpoint. Verification itself is delegated to PyJWT.
"""

import asyncio
import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Protocol

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.config.settings import Settings, settings
from src.events.errors import ForbiddenError, UpstreamUnavailableError
from src.identity.dtos import Actor
from src.identity.permissions import groups_for_permissions

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class TokenVerifier(Protocol):
    async def __call__(self, token: str) -> Actor:
        """Verify the token and return the actor it identifies.

        Raises jwt.PyJWTError when the token is not acceptable and
        UpstreamUnavailableError when the signing keys cannot be fetched.
        """
        ...


def actor_from_claims(claims: dict, permissions_claim: str) -> Actor:
    subject = claims.get("sub")
    if not subject:
        raise jwt.MissingRequiredClaimError("sub")
    permissions = frozenset(claims.get(permissions_claim) or claims.get("permissions") or ())
    return Actor(
        identity=subject,
        groups=groups_for_permissions(permissions),
        permissions=permissions,
    )


class Auth0TokenVerifier:
    def __init__(self, config: Settings = settings, jwks_client: jwt.PyJWKClient | None = None):
        self._config = config
        self._jwks_client = jwks_client or jwt.PyJWKClient(config.auth0_jwks_url, cache_keys=True)

    async def __call__(self, token: str) -> Actor:
        try:
            # fetching the JWKS is blocking I/O
            signing_key = await asyncio.to_thread(
                self._jwks_client.get_signing_key_from_jwt, token
            )
        except jwt.PyJWKClientConnectionError as e:
            logger.error(f"Could not fetch signing keys from {self._config.auth0_jwks_url}: {e}")
            raise UpstreamUnavailableError("Identity provider unavailable, please retry") from e
        claims = jwt.decode(
            token,
            key=signing_key.key,
            algorithms=["RS256"],
            audience=self._config.AUTH0_AUDIENCE,
            issuer=self._config.auth0_issuer,
        )
        return actor_from_claims(claims, self._config.PERMISSIONS_CLAIM)


@lru_cache
def get_token_verifier() -> TokenVerifier:
    """Factory for the token verifier. Override in tests."""
    return Auth0TokenVerifier()


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Actor:
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return await verifier(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=401,
            detail="invalid token...",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_permission(permission: str) -> Callable:
    """Build a dependency that only admits actors holding ``permission``."""

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.has_permission(permission):
            raise ForbiddenError(f"Missing permission '{permission}'")
        return actor

    return dependency
