"""Keycloak Admin API client library.

Read-only access to the data the role attributes mapper needs, plus
adapters that expose it through the mapper's host protocols.

Architecture:
- client.py: HTTP client with service account authentication and auto-refresh
- realm.py: Client lookup by clientId (KeycloakClientLookup)
- users.py: User lookup by username or id
- roles.py: Client role mappings and role attributes (KeycloakRoleSource, KeycloakAttributeSource)
- sessions.py: Active sessions and the clients they are authenticated with
- exceptions.py: Typed exceptions for error handling

Usage:
    from claims_mapper.core.keycloak import create_service_account_client, KeycloakRoleSource

    client = create_service_account_client("http://keycloak:8080", "demo", "automation-cli", "secret")
    roles = KeycloakRoleSource(client, "demo")
"""
from .client import (
    KeycloakClient,
    create_service_account_client,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    UserNotFoundError,
    RoleAttributesUnavailableError,
)
from .realm import RealmService, KeycloakClientLookup
from .users import UserService
from .roles import RoleService, KeycloakRoleSource, KeycloakAttributeSource
from .sessions import SessionService

__all__ = [
    # Client
    "KeycloakClient",
    "create_service_account_client",
    "REQUEST_TIMEOUT",

    # Exceptions
    "KeycloakError",
    "KeycloakAPIError",
    "UserNotFoundError",
    "RoleAttributesUnavailableError",

    # Services
    "RealmService",
    "UserService",
    "RoleService",
    "SessionService",

    # Host adapters
    "KeycloakClientLookup",
    "KeycloakRoleSource",
    "KeycloakAttributeSource",
]
