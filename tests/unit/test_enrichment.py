"""ClaimEnrichmentService against a stubbed Admin API."""
import logging

import pytest
import requests

from claims_mapper.config.mapper_config import MapperConfig
from claims_mapper.core.claim_attachment import TokenKind
from claims_mapper.core.enrichment import ClaimEnrichmentService
from claims_mapper.core.keycloak import UserNotFoundError, create_service_account_client
from tests.conftest import StubResponse

BASE = "http://kc"

REALM_DATA = {
    "/admin/realms/demo/users": [{"id": "u-alice", "username": "alice"}],
    "/admin/realms/demo/users/u-alice": {"id": "u-alice", "username": "alice"},
    "/admin/realms/demo/users/u-alice/sessions": [
        {"id": "sess-1", "clients": {"c-web": "web-app"}},
    ],
    "/admin/realms/demo/users/u-alice/role-mappings/clients/c-web": [
        {"id": "r-admin", "name": "admin", "containerId": "c-web"},
        {"id": "r-user", "name": "user", "containerId": "c-web"},
    ],
    "/admin/realms/demo/users/u-alice/role-mappings/clients/c-mobile": [],
    "/admin/realms/demo/roles-by-id/r-admin": {
        "id": "r-admin",
        "name": "admin",
        "attributes": {"department": ["IT", "Security"], "level": ["5"]},
    },
    "/admin/realms/demo/roles-by-id/r-user": {
        "id": "r-user",
        "name": "user",
        "attributes": {"department": ["Sales"]},
    },
}

CLIENTS = {
    "web-app": [{"id": "c-web", "clientId": "web-app"}],
    "mobile-app": [{"id": "c-mobile", "clientId": "mobile-app"}],
}


@pytest.fixture()
def fake_keycloak(monkeypatch):
    """Serve REALM_DATA for GET requests; returns the mutable route table."""
    routes = {path: (payload, 200) for path, payload in REALM_DATA.items()}

    def _get(url, params=None, headers=None, timeout=None, **kwargs):
        path = url[len(BASE):]
        if path == "/admin/realms/demo/clients":
            return StubResponse(CLIENTS.get((params or {}).get("clientId"), []), 200, url)
        if path not in routes:
            return StubResponse({"error": "not found"}, 404, url)
        payload, status = routes[path]
        return StubResponse(payload, status, url)

    monkeypatch.setattr(requests, "get", _get)
    return routes


@pytest.fixture()
def service(fake_keycloak):
    kc = create_service_account_client(BASE, "demo", "automation-cli", "secret")
    return ClaimEnrichmentService(kc, "demo")


def test_enrich_adds_claim(service):
    claims = {"sub": "u-alice"}

    result = service.enrich(claims, TokenKind.ACCESS, {}, username="alice", client_id="web-app")

    assert result.attached is True
    assert result.client.client_id == "web-app"
    assert claims["role_attributes"] == {
        "admin": {"department": ["IT", "Security"], "level": ["5"]},
        "user": {"department": ["Sales"]},
    }


def test_enrich_by_user_id_uses_session_clients(service):
    claims = {}
    result = service.enrich(claims, TokenKind.ID, MapperConfig(claim_name="attrs"), user_id="u-alice")
    assert result.attached is True
    assert set(claims["attrs"]) == {"admin", "user"}


def test_enrich_without_roles_leaves_claims(service):
    claims = {"sub": "u-alice"}
    result = service.enrich(claims, TokenKind.ACCESS, {}, username="alice", client_id="mobile-app")
    assert result.attached is False
    assert result.reason == "no client roles"
    assert claims == {"sub": "u-alice"}


def test_enrich_unknown_client_falls_back(service, caplog):
    with caplog.at_level(logging.WARNING, logger="claims_mapper.core.enrichment"):
        result = service.enrich({}, TokenKind.ACCESS, {}, username="alice", client_id="ghost-app")
    assert result.client.client_id == "web-app"
    assert "ghost-app" in caplog.text


def test_enrich_skips_role_whose_attributes_fail(service, fake_keycloak):
    fake_keycloak["/admin/realms/demo/roles-by-id/r-admin"] = ({"error": "boom"}, 500)
    claims = {}

    result = service.enrich(claims, TokenKind.ACCESS, {}, username="alice", client_id="web-app")

    assert result.attached is True
    assert claims["role_attributes"] == {"user": {"department": ["Sales"]}}


def test_enrich_session_read_failure_still_uses_client(service, fake_keycloak):
    fake_keycloak["/admin/realms/demo/users/u-alice/sessions"] = ({"error": "forbidden"}, 403)
    claims = {}
    result = service.enrich(claims, TokenKind.ACCESS, {}, username="alice", client_id="web-app")
    assert result.attached is True


def test_enrich_session_connection_error_still_uses_client(service, monkeypatch):
    serve_route = requests.get

    def _get(url, *args, **kwargs):
        if url.endswith("/sessions"):
            raise requests.ConnectionError("reset")
        return serve_route(url, *args, **kwargs)

    monkeypatch.setattr(requests, "get", _get)
    claims = {}

    result = service.enrich(claims, TokenKind.ACCESS, {}, username="alice", client_id="web-app")

    assert result.attached is True
    assert result.client.client_id == "web-app"
    assert set(claims["role_attributes"]) == {"admin", "user"}


def test_enrich_unknown_user(service):
    with pytest.raises(UserNotFoundError):
        service.enrich({}, TokenKind.ACCESS, {}, username="ghost")
