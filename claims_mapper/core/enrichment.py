"""Token claim enrichment against a live Keycloak realm.

Wires the mapper to the Admin API adapters: resolves the user and their
sessions, then runs ClientRoleAttributesMapper on the given claims.
Shared by the HTTP service and the CLI.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Union

import requests

from claims_mapper.config.mapper_config import MapperConfig

from .claim_attachment import ClaimSetSink, TokenKind
from .client_resolution import UserSession
from .keycloak import (
    KeycloakAPIError,
    KeycloakAttributeSource,
    KeycloakClient,
    KeycloakClientLookup,
    KeycloakRoleSource,
    SessionService,
    UserService,
)
from .mapper import ClientRoleAttributesMapper, MappingResult

logger = logging.getLogger(__name__)


class ClaimEnrichmentService:
    """Adds role attribute claims to token claim sets for one realm."""

    def __init__(self, client: KeycloakClient, realm: str):
        """Initialize the enrichment service.

        Args:
            client: Authenticated Keycloak client
            realm: Realm the users and clients live in
        """
        self.realm = realm
        self.users = UserService(client)
        self.sessions = SessionService(client)
        self.client_lookup = KeycloakClientLookup(client, realm)
        self.mapper = ClientRoleAttributesMapper(
            KeycloakRoleSource(client, realm),
            attribute_source=KeycloakAttributeSource(client, realm),
            client_lookup=self.client_lookup,
        )

    def _user_session(self, user, session_id: Optional[str]) -> UserSession:
        try:
            return self.sessions.build_user_session(self.realm, user, session_id)
        except (KeycloakAPIError, requests.RequestException) as e:
            logger.warning(f"Could not read sessions for user {user.username}: {e}")
            return UserSession(id=session_id or "none", user=user)

    def enrich(
        self,
        claims: Dict[str, Any],
        token_kind: TokenKind,
        config: Union[MapperConfig, Dict[str, Any], None] = None,
        *,
        username: Optional[str] = None,
        user_id: Optional[str] = None,
        client_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> MappingResult:
        """Add the role attributes claim to ``claims`` in place.

        Args:
            claims: Claim set of the token being built
            token_kind: Kind of token the claims belong to
            config: MapperConfig or raw mapper config
            username: User to map (or user_id)
            user_id: User to map (or username)
            client_id: clientId of the current client-session context
            session_id: User session the token is issued in

        Returns:
            MappingResult

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = self.users.resolve_user(self.realm, username=username, user_id=user_id)

        session_client = None
        if client_id:
            session_client = self.client_lookup.get_client_by_client_id(client_id)
            if session_client is None:
                logger.warning(f"Client '{client_id}' not found in realm '{self.realm}'; using fallback resolution")

        user_session = self._user_session(user, session_id)
        sink = ClaimSetSink(claims, token_kind)
        return self.mapper.apply(sink, user_session, config, session_client=session_client)
