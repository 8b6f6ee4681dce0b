"""
Keycloak access-token verification.

Tokens are RS256 JWTs signed by the realm. The realm's public keys are read
from its JWKS endpoint and cached per key id for ``cache_seconds`` (24 hours
by default). A token signed with a key id the cache does not know triggers
one refresh of the key set, rate limited so that garbage tokens cannot make
every request hit the identity provider.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from app.core.logging_utils import sanitize_for_logging
from app.services.http_client import HTTPClientManager
from app.shared.errors import ConfigurationError, InvalidTokenError

logger = logging.getLogger("QJournal.Auth")

DEFAULT_ALGORITHMS = ("RS256",)
MIN_REFRESH_INTERVAL_SECONDS = 30.0


@dataclass(frozen=True)
class Identity:
    """Verified claims of the caller."""
    subject: str
    email: Optional[str] = None
    name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    preferred_username: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: Dict) -> "Identity":
        return cls(
            subject=claims["sub"],
            email=claims.get("email"),
            name=claims.get("name"),
            given_name=claims.get("given_name"),
            family_name=claims.get("family_name"),
            preferred_username=claims.get("preferred_username"),
        )

    @property
    def display_name(self) -> Optional[str]:
        if self.name:
            return self.name
        full = " ".join(part for part in (self.given_name, self.family_name) if part)
        return full or self.preferred_username


class KeycloakTokenVerifier:
    """Verifies bearer tokens against a Keycloak realm."""

    def __init__(
        self,
        http: HTTPClientManager,
        issuer: str,
        jwks_url: str,
        cache_seconds: float = 86400,
        algorithms=DEFAULT_ALGORITHMS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.http = http
        self.issuer = issuer
        self.jwks_url = jwks_url
        self.cache_seconds = cache_seconds
        self.algorithms = list(algorithms)
        self._clock = clock
        self._keys: Dict[str, Dict] = {}
        self._fetched_at: Optional[float] = None
        self._lock = asyncio.Lock()

    async def verify(self, token: str) -> Identity:
        """
        Verify ``token`` and return the caller's identity.

        Raises:
            InvalidTokenError: malformed, badly signed, expired, wrong issuer,
                unknown signing key, or the key set could not be fetched
            ConfigurationError: the identity provider is not configured
        """
        if not self.issuer or not self.jwks_url:
            raise ConfigurationError("KEYCLOAK_URL and KEYCLOAK_REALM must be set")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise InvalidTokenError("Invalid or expired token") from exc

        key = await self._signing_key(header.get("kid"))

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                issuer=self.issuer,
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as exc:
            logger.info("Token verification failed: token expired")
            raise InvalidTokenError("Invalid or expired token") from exc
        except (JWTClaimsError, JWTError) as exc:
            logger.info(f"Token verification failed: {exc}")
            raise InvalidTokenError("Invalid or expired token") from exc

        if not claims.get("sub"):
            raise InvalidTokenError("Token has no subject")

        identity = Identity.from_claims(claims)
        logger.debug(
            "Authenticated user",
            extra={"claims": sanitize_for_logging({"sub": identity.subject, "email": identity.email})},
        )
        return identity

    def _cache_fresh(self) -> bool:
        return self._fetched_at is not None and self._clock() - self._fetched_at < self.cache_seconds

    async def _signing_key(self, kid: Optional[str]) -> Dict:
        if not self._cache_fresh():
            await self._refresh(force=False)

        key = self._lookup(kid)
        if key is None and self._refresh_allowed():
            # Key rotation: the realm may have published a key we have not seen yet
            await self._refresh(force=True)
            key = self._lookup(kid)

        if key is None:
            raise InvalidTokenError("Invalid or expired token")
        return key

    def _lookup(self, kid: Optional[str]) -> Optional[Dict]:
        if kid is not None:
            return self._keys.get(kid)
        if len(self._keys) == 1:
            return next(iter(self._keys.values()))
        return None

    def _refresh_allowed(self) -> bool:
        return self._fetched_at is not None and self._clock() - self._fetched_at >= MIN_REFRESH_INTERVAL_SECONDS

    async def _refresh(self, force: bool) -> None:
        async with self._lock:
            # Another request may have refreshed while we waited
            if force and not self._refresh_allowed():
                return
            if not force and self._cache_fresh():
                return
            self._keys = await self._fetch_keys()
            self._fetched_at = self._clock()
            logger.info(f"Loaded {len(self._keys)} signing keys from identity provider")

    async def _fetch_keys(self) -> Dict[str, Dict]:
        client = await self.http.get_client()
        try:
            response = await client.get(self.jwks_url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Unable to fetch signing keys from {self.jwks_url}: {exc}")
            raise InvalidTokenError("Unable to verify token") from exc

        return {
            key["kid"]: key
            for key in payload.get("keys", [])
            if key.get("kid") and key.get("use", "sig") == "sig"
        }
