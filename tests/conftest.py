import pytest
from fastapi.testclient import TestClient

from app.core.config import Config
from app.features.auth.keycloak import Identity, KeycloakTokenVerifier
from app.features.database.client import DatabaseClient
from app.features.journaling.service import JournalService
from app.features.journaling.summaries import SummaryOrchestrator
from app.services.http_client import HTTPClientManager
from tests.fakes import ISSUER, JWKS_URL, FakeSupabase, ScriptedGenerator, TokenFactory


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def database(supabase):
    return DatabaseClient(supabase)


@pytest.fixture
def generator():
    return ScriptedGenerator()


@pytest.fixture
def service(database, generator):
    return JournalService(database, SummaryOrchestrator(generator))


@pytest.fixture
def identity():
    return Identity(subject="user-123", email="sam@example.com", name="Sam Rivera")


@pytest.fixture
def tokens():
    return TokenFactory()


@pytest.fixture
def verifier(tokens):
    return KeycloakTokenVerifier(
        HTTPClientManager(transport=tokens.transport()),
        issuer=ISSUER,
        jwks_url=JWKS_URL,
    )


@pytest.fixture
def test_config():
    config = Config()
    config.KEYCLOAK_URL = "https://auth.example.test"
    config.KEYCLOAK_REALM = "qjournal"
    config.LLM_PROVIDER = "anthropic"
    config.HISTORY_LIMIT = 30
    config.DASHBOARD_LIMIT = 10
    config.MAX_HISTORY_LIMIT = 365
    config.CORS_ORIGINS = ["*"]
    return config


@pytest.fixture
def client(test_config, database, generator, verifier):
    from main import create_app

    app = create_app(
        config=test_config,
        database=database,
        text_generator=generator,
        token_verifier=verifier,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens.token()}"}
