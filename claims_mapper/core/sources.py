"""Host-facing protocols and in-memory implementations.

The mapper never talks to the identity provider directly. It asks a
RoleSource for the user's roles on a client, an AttributeSource for each
role's attributes and a ClientLookup to resolve a client by its clientId.
The Keycloak Admin API adapters live in claims_mapper.core.keycloak.roles.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from .client_resolution import ClientRef
from .exceptions import AttributeLookupError
from .role_attributes import Role


class RoleSource(Protocol):
    """Roles assigned to a user, scoped to one client."""

    def get_client_roles(self, user: Any, client: ClientRef) -> Iterable[Role]:
        ...


class AttributeSource(Protocol):
    """Attribute mapping of a role; None when the role has none.

    Implementations raise AttributeLookupError when the lookup itself fails.
    """

    def get_role_attributes(self, role: Role) -> Optional[Mapping[str, Sequence[str]]]:
        ...


class ClientLookup(Protocol):
    """Client resolution by clientId within the current realm."""

    def get_client_by_client_id(self, client_id: str) -> Optional[ClientRef]:
        ...


class StaticRoleSource:
    """RoleSource backed by a dict of (user, clientId) -> roles.

    Usage:
        source = StaticRoleSource({("alice", "web-app"): [Role("admin", {"level": ["5"]})]})
    """

    def __init__(self, assignments: Optional[Mapping[tuple, Sequence[Role]]] = None):
        self._assignments: Dict[tuple, List[Role]] = {
            key: list(roles) for key, roles in (assignments or {}).items()
        }

    def get_client_roles(self, user: Any, client: ClientRef) -> List[Role]:
        username = getattr(user, "username", user)
        return list(self._assignments.get((username, client.client_id), []))


class StaticClientLookup:
    """ClientLookup over a fixed list of clients."""

    def __init__(self, clients: Iterable[ClientRef] = ()):
        self._clients = {client.client_id: client for client in clients}

    def get_client_by_client_id(self, client_id: str) -> Optional[ClientRef]:
        return self._clients.get(client_id)


__all__ = [
    "AttributeLookupError",
    "AttributeSource",
    "ClientLookup",
    "RoleSource",
    "StaticClientLookup",
    "StaticRoleSource",
]
