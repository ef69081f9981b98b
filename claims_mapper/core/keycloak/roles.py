"""Keycloak client role reads and role/attribute sources."""
from __future__ import annotations
import logging
from typing import Dict, List, Mapping, Optional, Sequence

import requests

from claims_mapper.core.client_resolution import ClientRef, UserRef
from claims_mapper.core.role_attributes import Role

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, RoleAttributesUnavailableError

logger = logging.getLogger(__name__)


class RoleService:
    """Service for reading Keycloak client roles."""

    def __init__(self, client: KeycloakClient):
        """Initialize role service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def get_client_role_mappings(self, realm: str, user_id: str, client_uuid: str) -> List[dict]:
        """Client roles directly assigned to a user.

        Args:
            realm: Realm name
            user_id: User ID
            client_uuid: Internal id of the client

        Returns:
            List of role representations
        """
        resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}/role-mappings/clients/{client_uuid}")
        return resp.json() or []

    def get_role_by_id(self, realm: str, role_id: str) -> dict:
        """Full role representation, including ``attributes``."""
        resp = self.client.get(f"/admin/realms/{realm}/roles-by-id/{role_id}")
        return resp.json()

    def get_client_role(self, realm: str, client_uuid: str, role_name: str) -> dict:
        """Full client role representation looked up by name."""
        resp = self.client.get(f"/admin/realms/{realm}/clients/{client_uuid}/roles/{role_name}")
        return resp.json()


class KeycloakRoleSource:
    """RoleSource backed by the user's client role mappings."""

    def __init__(self, client: KeycloakClient, realm: str):
        self.role_service = RoleService(client)
        self.realm = realm

    def get_client_roles(self, user: UserRef, client: ClientRef) -> List[Role]:
        mappings = self.role_service.get_client_role_mappings(self.realm, user.id, client.uuid)
        return [
            Role(
                name=rep["name"],
                # Mapping listings may omit attributes; the attribute source fetches them
                attributes=rep.get("attributes"),
                id=rep.get("id"),
                container_id=rep.get("containerId") or client.uuid,
            )
            for rep in mappings
            if rep.get("name")
        ]


class KeycloakAttributeSource:
    """AttributeSource reading each role's full representation."""

    def __init__(self, client: KeycloakClient, realm: str):
        self.role_service = RoleService(client)
        self.realm = realm

    def get_role_attributes(self, role: Role) -> Optional[Mapping[str, Sequence[str]]]:
        try:
            if role.id:
                rep = self.role_service.get_role_by_id(self.realm, role.id)
            elif role.container_id:
                rep = self.role_service.get_client_role(self.realm, role.container_id, role.name)
            else:
                return role.attributes
        except (KeycloakAPIError, requests.RequestException) as e:
            raise RoleAttributesUnavailableError(role.name, str(e)) from e

        attributes: Optional[Dict[str, List[str]]] = rep.get("attributes")
        return attributes
