"""Keycloak session reads."""
from __future__ import annotations
from typing import List, Dict, Optional

from claims_mapper.core.client_resolution import ClientRef, UserRef, UserSession

from .client import KeycloakClient


class SessionService:
    """Service for reading Keycloak user sessions."""

    def __init__(self, client: KeycloakClient):
        """Initialize session service.

        Args:
            client: Authenticated Keycloak client
        """
        self.client = client

    def get_user_sessions(self, realm: str, user_id: str) -> List[Dict]:
        """Get all active sessions for a user.

        Each representation carries a ``clients`` map of client uuid ->
        clientId for the clients the session is authenticated with.

        Args:
            realm: Realm name
            user_id: User ID

        Returns:
            List of active session representations
        """
        resp = self.client.get(f"/admin/realms/{realm}/users/{user_id}/sessions")
        return resp.json() or []

    def build_user_session(self, realm: str, user: UserRef, session_id: Optional[str] = None) -> UserSession:
        """Build the UserSession used for client resolution.

        With a session_id, only that session's clients are used. Without
        one, the clients of all active sessions are merged in the order the
        server returns them.

        Args:
            realm: Realm name
            user: Session owner
            session_id: Optional session to restrict to

        Returns:
            UserSession (with no clients if nothing matched)
        """
        sessions = self.get_user_sessions(realm, user.id)
        if session_id:
            sessions = [s for s in sessions if s.get("id") == session_id]

        clients: Dict[str, ClientRef] = {}
        for rep in sessions:
            for uuid, client_id in (rep.get("clients") or {}).items():
                clients.setdefault(uuid, ClientRef(uuid=uuid, client_id=client_id))

        resolved_id = session_id or (sessions[0].get("id") if sessions else "") or "none"
        return UserSession(id=resolved_id, user=user, authenticated_clients=clients)
