"""Keycloak user lookups."""
from __future__ import annotations
from typing import Optional

from claims_mapper.core.client_resolution import UserRef

from .client import KeycloakClient
from .exceptions import KeycloakAPIError, UserNotFoundError


class UserService:
    """Service for reading Keycloak users."""

    def __init__(self, client: KeycloakClient):
        """Initialize user service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def get_user_by_username(self, realm: str, username: str) -> Optional[dict]:
        """Return the user representation that exactly matches the username.

        Args:
            realm: Realm name
            username: Username to search for

        Returns:
            User representation or None if not found
        """
        resp = self.client.get(f"/admin/realms/{realm}/users", params={"username": username, "exact": "true"})
        for user in resp.json() or []:
            if user.get("username") == username:
                return user
        return None

    def get_user(self, realm: str, user_id: str) -> Optional[dict]:
        """Return the user representation for a user id, or None if unknown."""
        try:
            resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}")
        except KeycloakAPIError as e:
            if e.status_code == 404:
                return None
            raise
        return resp.json()

    def resolve_user(self, realm: str, *, username: Optional[str] = None, user_id: Optional[str] = None) -> UserRef:
        """Look up a user by id or username.

        Raises:
            UserNotFoundError: If no such user exists
        """
        if user_id:
            rep = self.get_user(realm, user_id)
        elif username:
            rep = self.get_user_by_username(realm, username)
        else:
            raise UserNotFoundError("username or user_id is required")

        if not rep:
            raise UserNotFoundError(f"User '{username or user_id}' not found in realm '{realm}'")
        return UserRef(id=rep["id"], username=rep.get("username", username or ""))
