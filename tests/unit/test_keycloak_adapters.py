"""Keycloak Admin API adapters, with requests stubbed per test."""
import pytest
import requests

from claims_mapper.core.client_resolution import ClientRef, UserRef
from claims_mapper.core.exceptions import AttributeLookupError
from claims_mapper.core.keycloak import (
    KeycloakAPIError,
    KeycloakAttributeSource,
    KeycloakClient,
    KeycloakClientLookup,
    KeycloakError,
    KeycloakRoleSource,
    SessionService,
    UserService,
    UserNotFoundError,
    create_service_account_client,
)
from claims_mapper.core.role_attributes import Role
from tests.conftest import StubResponse

BASE = "http://kc"


def install_routes(monkeypatch, routes: dict):
    """Serve GET requests from a path -> (payload, status) table."""
    calls = []

    def _get(url, params=None, headers=None, timeout=None, **kwargs):
        path = url[len(BASE):]
        calls.append((path, params, headers))
        if path not in routes:
            return StubResponse({"error": "not found"}, 404, url)
        payload, status = routes[path]
        return StubResponse(payload, status, url)

    monkeypatch.setattr(requests, "get", _get)
    return calls


@pytest.fixture()
def kc():
    return create_service_account_client(BASE, "demo", "automation-cli", "secret")


def test_service_account_token_used_as_bearer(monkeypatch, kc):
    calls = install_routes(monkeypatch, {"/admin/realms/demo/clients": ([], 200)})
    kc.get("/admin/realms/demo/clients")
    assert calls[0][2]["Authorization"] == "Bearer test-token"


def test_unauthenticated_client_refuses_requests():
    with pytest.raises(KeycloakAPIError) as exc:
        KeycloakClient(BASE).get("/admin/realms/demo/clients")
    assert exc.value.status_code == 401


def test_http_error_raises(monkeypatch, kc):
    install_routes(monkeypatch, {"/admin/realms/demo/clients": ({"error": "forbidden"}, 403)})
    with pytest.raises(KeycloakAPIError) as exc:
        kc.get("/admin/realms/demo/clients")
    assert exc.value.status_code == 403


def test_client_lookup(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/clients": ([{"id": "c-web", "clientId": "web-app"}], 200),
    })
    lookup = KeycloakClientLookup(kc, "demo")
    assert lookup.get_client_by_client_id("web-app") == ClientRef("c-web", "web-app")


def test_client_lookup_unknown(monkeypatch, kc):
    install_routes(monkeypatch, {"/admin/realms/demo/clients": ([], 200)})
    assert KeycloakClientLookup(kc, "demo").get_client_by_client_id("nope") is None


def test_resolve_user_by_username(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/users": ([{"id": "u-alice", "username": "alice"}], 200),
    })
    assert UserService(kc).resolve_user("demo", username="alice") == UserRef("u-alice", "alice")


def test_resolve_user_missing(monkeypatch, kc):
    install_routes(monkeypatch, {"/admin/realms/demo/users": ([], 200)})
    with pytest.raises(UserNotFoundError):
        UserService(kc).resolve_user("demo", username="ghost")


def test_resolve_user_by_unknown_id(monkeypatch, kc):
    install_routes(monkeypatch, {})
    with pytest.raises(UserNotFoundError):
        UserService(kc).resolve_user("demo", user_id="u-ghost")


def test_role_source_reads_client_role_mappings(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/users/u-alice/role-mappings/clients/c-web": (
            [{"id": "r1", "name": "admin", "containerId": "c-web"}, {"id": "r2", "name": "user"}],
            200,
        ),
    })
    roles = KeycloakRoleSource(kc, "demo").get_client_roles(UserRef("u-alice", "alice"), ClientRef("c-web", "web-app"))
    assert [r.name for r in roles] == ["admin", "user"]
    assert roles[1].container_id == "c-web"


def test_attribute_source_reads_full_role(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/roles-by-id/r1": ({"id": "r1", "name": "admin", "attributes": {"level": ["5"]}}, 200),
        "/admin/realms/demo/roles-by-id/r2": ({"id": "r2", "name": "user"}, 200),
    })
    source = KeycloakAttributeSource(kc, "demo")
    assert source.get_role_attributes(Role("admin", id="r1")) == {"level": ["5"]}
    assert source.get_role_attributes(Role("user", id="r2")) is None


def test_attribute_source_by_client_and_name(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/clients/c-web/roles/admin": ({"name": "admin", "attributes": {"level": ["5"]}}, 200),
    })
    source = KeycloakAttributeSource(kc, "demo")
    assert source.get_role_attributes(Role("admin", container_id="c-web")) == {"level": ["5"]}


def test_attribute_source_failure_is_lookup_error(monkeypatch, kc):
    install_routes(monkeypatch, {"/admin/realms/demo/roles-by-id/r1": ({"error": "boom"}, 500)})
    with pytest.raises(AttributeLookupError) as exc:
        KeycloakAttributeSource(kc, "demo").get_role_attributes(Role("admin", id="r1"))
    assert exc.value.role_name == "admin"
    assert isinstance(exc.value, KeycloakError)


def test_keycloak_package_exports_resolve():
    import claims_mapper.core.keycloak as keycloak

    assert all(hasattr(keycloak, name) for name in keycloak.__all__)


def test_user_session_merges_clients(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/users/u-alice/sessions": (
            [
                {"id": "s1", "clients": {"c-web": "web-app"}},
                {"id": "s2", "clients": {"c-mobile": "mobile-app", "c-web": "web-app"}},
            ],
            200,
        ),
    })
    session = SessionService(kc).build_user_session("demo", UserRef("u-alice", "alice"))
    assert session.id == "s1"
    assert [c.client_id for c in session.authenticated_clients.values()] == ["web-app", "mobile-app"]


def test_user_session_restricted_to_session_id(monkeypatch, kc):
    install_routes(monkeypatch, {
        "/admin/realms/demo/users/u-alice/sessions": (
            [
                {"id": "s1", "clients": {"c-web": "web-app"}},
                {"id": "s2", "clients": {"c-mobile": "mobile-app"}},
            ],
            200,
        ),
    })
    session = SessionService(kc).build_user_session("demo", UserRef("u-alice", "alice"), "s2")
    assert session.id == "s2"
    assert list(session.authenticated_clients) == ["c-mobile"]
