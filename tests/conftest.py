"""Pytest shared fixtures."""
import json
import os
import pathlib
import sys
import time
from typing import Optional

# Add project root to Python path (scripts/ is not an installed package)
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DEMO_MODE", "true")

import jwt
import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa

from claims_mapper.config import AppConfig
from claims_mapper.core.client_resolution import ClientRef, UserRef, UserSession
from claims_mapper.core.role_attributes import Role
from claims_mapper.flask_app import create_app


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload, status_code: int = 200, url: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)
        self.url = url

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a real Keycloak.

    Integration tests are marked with @pytest.mark.integration and skip this.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _stub_post(url, *args, **kwargs):
        if url.endswith("/protocol/openid-connect/token"):
            return StubResponse({"access_token": "test-token", "expires_in": 300}, url=url)
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    def _stub_get(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP GET in unit test: {url}")

    monkeypatch.setattr(requests, "post", _stub_post)
    monkeypatch.setattr(requests, "get", _stub_get)


# ─────────────────────────────────────────────────────────────────────────────
# Settings & Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        demo_mode=False,
        keycloak_url="http://keycloak:8080",
        keycloak_realm="demo",
        keycloak_service_realm="demo",
        keycloak_issuer="https://localhost/realms/demo",
        keycloak_server_url="http://keycloak:8080/realms/demo",
        keycloak_service_client_id="automation-cli",
        keycloak_service_client_secret="svc-secret",
        log_level="DEBUG",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def app_config() -> AppConfig:
    return make_config()


@pytest.fixture()
def flask_app(app_config):
    app = create_app(app_config)
    app.config.update(TESTING=True, SKIP_OAUTH_FOR_TESTS=True)
    return app


@pytest.fixture()
def client(flask_app):
    """Flask test client; bearer tokens are accepted without validation."""
    with flask_app.test_client() as client:
        with flask_app.app_context():
            yield client


# ─────────────────────────────────────────────────────────────────────────────
# Domain Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def web_app_client() -> ClientRef:
    return ClientRef(uuid="c-web", client_id="web-app")


@pytest.fixture()
def alice() -> UserRef:
    return UserRef(id="u-alice", username="alice")


@pytest.fixture()
def alice_session(alice, web_app_client) -> UserSession:
    return UserSession(id="sess-1", user=alice, authenticated_clients={web_app_client.uuid: web_app_client})


@pytest.fixture()
def scenario_roles() -> list[Role]:
    return [
        Role("admin", {"department": ["IT", "Security"], "level": ["5"]}),
        Role("user", {"department": ["Sales"]}),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for JWT Testing
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """Generate RSA key pair for JWT signing in tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return {"private_key": private_key, "public_key": private_key.public_key()}


def create_valid_jwt(
    rsa_key_pair: dict,
    issuer: str = "https://localhost/realms/demo",
    azp: str = "token-service",
    exp_offset: int = 3600,
    kid: str = "default-key-id",
) -> str:
    """Create an RS256-signed JWT for testing."""
    now = int(time.time())
    payload = {
        "iss": issuer,
        "aud": "account",
        "sub": "service-account-token-service",
        "azp": azp,
        "exp": now + exp_offset,
        "nbf": now,
        "iat": now,
    }
    return jwt.encode(payload, rsa_key_pair["private_key"], algorithm="RS256", headers={"kid": kid})
