"""Keycloak realm client lookups."""
from __future__ import annotations
from typing import Optional

from claims_mapper.core.client_resolution import ClientRef

from .client import KeycloakClient


class RealmService:
    """Service for reading clients of a Keycloak realm."""

    def __init__(self, client: KeycloakClient):
        """Initialize realm service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def get_client(self, realm: str, client_id: str) -> Optional[dict]:
        """Return the client representation matching client_id, if it exists.

        Args:
            realm: Realm name
            client_id: Client ID to find

        Returns:
            Client representation or None if not found
        """
        resp = self.client.get(f"/admin/realms/{realm}/clients", params={"clientId": client_id})
        for client in resp.json() or []:
            if client.get("clientId") == client_id:
                return client
        return None


class KeycloakClientLookup:
    """ClientLookup backed by the Admin API."""

    def __init__(self, client: KeycloakClient, realm: str):
        self.realm_service = RealmService(client)
        self.realm = realm

    def get_client_by_client_id(self, client_id: str) -> Optional[ClientRef]:
        rep = self.realm_service.get_client(self.realm, client_id)
        if not rep or not rep.get("id"):
            return None
        return ClientRef(uuid=rep["id"], client_id=rep.get("clientId", client_id))
