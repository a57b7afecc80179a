from __future__ import annotations

import time
from typing import Any, Dict, Iterable, Optional
import logging

import httpx
from jose import jwk, jwt
from jose.exceptions import JWKError, JWSError, JWTError
from jose.utils import base64url_decode
from fastapi import HTTPException, status

from social_dashboard.config import settings


logger = logging.getLogger("auth.jwks")


class _JWKSCache:
    def __init__(self) -> None:
        self.jwks: Optional[Dict[str, Any]] = None
        self.cached_at: float = 0.0
        self.ttl_seconds: int = 300

    def get(self) -> Optional[Dict[str, Any]]:
        if self.jwks and (time.time() - self.cached_at) < self.ttl_seconds:
            return self.jwks
        return None

    def set(self, jwks: Optional[Dict[str, Any]]) -> None:
        self.jwks = jwks
        self.cached_at = time.time()


_cache = _JWKSCache()


def _fetch_jwks() -> Dict[str, Any]:
    cached = _cache.get()
    if cached:
        return cached
    try:
        resp = httpx.get(settings.AUTH_JWKS_URL, timeout=10)
        resp.raise_for_status()
        data = resp.json()
        _cache.set(data)
        return data
    except httpx.HTTPError as exc:
        logger.exception("JWKS fetch failed", extra={"jwks_url": settings.AUTH_JWKS_URL})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Unable to fetch identity provider keys",
        ) from exc


def _find_key(jwks: Dict[str, Any], kid: str) -> Optional[Dict[str, Any]]:
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key
    return None


def _get_public_key(token: str) -> Dict[str, Any]:
    try:
        headers = jwt.get_unverified_header(token)
    except JWTError as exc:
        logger.warning("Invalid token header", exc_info=exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    kid = headers.get("kid")
    if not kid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing kid in token")
    key = _find_key(_fetch_jwks(), kid)
    if key:
        return key
    # cache miss; refetch once in case keys rotated
    _cache.set(None)
    key = _find_key(_fetch_jwks(), kid)
    if key:
        return key
    logger.warning("Signing key not found", extra={"kid": kid})
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Signing key not found")


def _audience_matches(aud: Any, accepted: Iterable[str]) -> bool:
    accepted = set(accepted)
    if isinstance(aud, str):
        return aud in accepted
    if isinstance(aud, (list, tuple)):
        return any(value in accepted for value in aud)
    return False


def _signing_pem(token: str, public_key: Dict[str, Any]) -> str:
    key = jwk.construct(public_key)
    signing_input, encoded_sig = token.rsplit(".", 1)
    if not key.verify(signing_input.encode(), base64url_decode(encoded_sig.encode())):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token signature")
    return key.to_pem().decode()


def verify_access_token(token: str) -> Dict[str, Any]:
    """Verify a hosted-auth access token and return its claims. Raises 401 on any failure."""
    public_key = _get_public_key(token)
    try:
        claims = jwt.decode(
            token,
            key=_signing_pem(token, public_key),
            algorithms=[public_key.get("alg", "RS256")],
            issuer=settings.AUTH_JWT_ISSUER,
            # Audience may be a list; checked against AUTH_AUDIENCE below.
            options={"verify_aud": False},
        )
    except (JWTError, JWSError, JWKError, ValueError) as exc:
        logger.warning("Token verification failed", exc_info=exc, extra={"kid": public_key.get("kid")})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    if not _audience_matches(claims.get("aud"), settings.AUTH_AUDIENCE):
        logger.warning("Token audience rejected", extra={"aud": claims.get("aud"), "sub": claims.get("sub")})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token audience")

    logger.debug("Access token accepted", extra={"kid": public_key.get("kid"), "sub": claims.get("sub")})
    return claims
