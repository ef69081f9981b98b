"""Which client's roles go into the token.

Fallback order:
1. Client bound to the current client-session context
2. Client whose clientId the token is issued for (access tokens, ``azp``)
3. First client among the user session's authenticated client sessions
4. None - the caller skips the claim

Step 3 follows the iteration order of the session's client mapping. With
sessions on several clients at once the pick is arbitrary; this is kept
as-is and logged at debug level rather than replaced by a guessed order.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientRef:
    """Client identity: internal id and public clientId."""
    uuid: str
    client_id: str


@dataclass(frozen=True)
class UserRef:
    """User identity as seen by role sources."""
    id: str
    username: str


@dataclass
class UserSession:
    """User session and the clients it is authenticated with.

    Attributes:
        id: Session id
        user: Session owner
        authenticated_clients: Client uuid -> ClientRef, in host order
    """
    id: str
    user: UserRef
    authenticated_clients: Mapping[str, ClientRef] = field(default_factory=dict)


def resolve_client(
    user_session: Optional[UserSession],
    *,
    session_client: Optional[ClientRef] = None,
    issued_for: Optional[str] = None,
    client_lookup: Any = None,
) -> Optional[ClientRef]:
    """Resolve the client whose roles should be mapped.

    Args:
        user_session: Current user session
        session_client: Client of the current client-session context
        issued_for: clientId the token is being issued for
        client_lookup: ClientLookup used to resolve ``issued_for``

    Returns:
        ClientRef or None if no client could be determined
    """
    if session_client is not None:
        return session_client

    if issued_for and client_lookup is not None:
        client = client_lookup.get_client_by_client_id(issued_for)
        if client is not None:
            return client
        logger.debug(f"Token audience '{issued_for}' does not match a client in this realm")

    if user_session is not None and user_session.authenticated_clients:
        candidates = list(user_session.authenticated_clients.values())
        if len(candidates) > 1:
            logger.debug(
                f"User session {user_session.id} has {len(candidates)} client sessions; "
                f"using the first one ({candidates[0].client_id})"
            )
        return candidates[0]

    session_id = user_session.id if user_session is not None else "unknown"
    logger.warning(f"Could not determine client from token or session context (session: {session_id})")
    return None
