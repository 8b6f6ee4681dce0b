import asyncio

import httpx
import pytest

from app.features.auth.keycloak import Identity, KeycloakTokenVerifier
from app.services.http_client import HTTPClientManager
from app.shared.errors import ConfigurationError, InvalidTokenError
from tests.fakes import ISSUER, JWKS_URL, generate_rsa_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


async def test_valid_token_yields_identity(verifier, tokens):
    identity = await verifier.verify(tokens.token(subject="kc-42", name="Sam Rivera"))

    assert identity.subject == "kc-42"
    assert identity.email == "kc-42@example.com"
    assert identity.display_name == "Sam Rivera"


def test_display_name_falls_back_to_given_and_family_name():
    assert Identity(subject="s", given_name="Sam", family_name="Rivera").display_name == "Sam Rivera"
    assert Identity(subject="s", preferred_username="sam").display_name == "sam"
    assert Identity(subject="s").display_name is None


async def test_expired_token_is_rejected(verifier, tokens):
    with pytest.raises(InvalidTokenError):
        await verifier.verify(tokens.token(expires_in=-60))


async def test_token_from_another_realm_is_rejected(verifier, tokens):
    with pytest.raises(InvalidTokenError):
        await verifier.verify(tokens.token(issuer="https://auth.example.test/realms/other"))


async def test_token_signed_with_another_key_is_rejected(verifier, tokens):
    forged_key, _ = generate_rsa_key(tokens.kid)

    with pytest.raises(InvalidTokenError):
        await verifier.verify(tokens.token(private_pem=forged_key))


async def test_garbage_token_is_rejected(verifier):
    with pytest.raises(InvalidTokenError):
        await verifier.verify("not-a-jwt")


async def test_signing_keys_are_cached(verifier, tokens):
    for _ in range(3):
        await verifier.verify(tokens.token())

    assert tokens.jwks_requests == 1


async def test_signing_keys_are_refetched_after_cache_expiry(tokens):
    clock = FakeClock()
    verifier = KeycloakTokenVerifier(
        HTTPClientManager(transport=tokens.transport()),
        issuer=ISSUER,
        jwks_url=JWKS_URL,
        cache_seconds=86400,
        clock=clock,
    )

    await verifier.verify(tokens.token())
    clock.now += 3600
    await verifier.verify(tokens.token())
    assert tokens.jwks_requests == 1

    clock.now += 86400
    await verifier.verify(tokens.token())
    assert tokens.jwks_requests == 2


async def test_rotated_key_is_picked_up(tokens):
    clock = FakeClock()
    verifier = KeycloakTokenVerifier(
        HTTPClientManager(transport=tokens.transport()),
        issuer=ISSUER,
        jwks_url=JWKS_URL,
        clock=clock,
    )
    await verifier.verify(tokens.token())

    # The realm rotates to a new key
    tokens.private_pem, tokens.public_jwk = generate_rsa_key("realm-key-2")
    tokens.kid = "realm-key-2"
    clock.now += 120

    identity = await verifier.verify(tokens.token())

    assert identity.subject == "user-123"
    assert tokens.jwks_requests == 2


async def test_unknown_key_id_is_rejected_without_hammering_the_provider(verifier, tokens):
    await verifier.verify(tokens.token())

    for _ in range(3):
        with pytest.raises(InvalidTokenError):
            await verifier.verify(tokens.token(kid="unknown-key"))

    assert tokens.jwks_requests == 1


async def test_concurrent_unknown_key_ids_share_one_refresh(tokens):
    clock = FakeClock()
    verifier = KeycloakTokenVerifier(
        HTTPClientManager(transport=tokens.transport(delay=0.01)),
        issuer=ISSUER,
        jwks_url=JWKS_URL,
        clock=clock,
    )
    await verifier.verify(tokens.token())
    clock.now += 60

    results = await asyncio.gather(
        *(verifier.verify(tokens.token(kid=f"unknown-{i}")) for i in range(20)),
        return_exceptions=True,
    )

    assert all(isinstance(result, InvalidTokenError) for result in results)
    assert tokens.jwks_requests == 2


async def test_unreachable_identity_provider_rejects_the_token(tokens):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    verifier = KeycloakTokenVerifier(
        HTTPClientManager(transport=httpx.MockTransport(refuse)),
        issuer=ISSUER,
        jwks_url=JWKS_URL,
    )

    with pytest.raises(InvalidTokenError, match="Unable to verify"):
        await verifier.verify(tokens.token())


async def test_unconfigured_identity_provider_is_a_configuration_error(tokens):
    verifier = KeycloakTokenVerifier(HTTPClientManager(), issuer="", jwks_url="")

    with pytest.raises(ConfigurationError):
        await verifier.verify(tokens.token())
