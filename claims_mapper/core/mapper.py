"""Client role attributes protocol mapper.

Runs once per token being built: resolves the client, reads the user's
roles on that client, builds the role attributes claim and attaches it.
Any failure results in the claim being left out; token issuance itself is
never blocked.

Usage:
    mapper = ClientRoleAttributesMapper(role_source, client_lookup=lookup)
    result = mapper.apply(
        ClaimSetSink(claims, TokenKind.ACCESS),
        user_session,
        {"claim.name": "role_attributes", "include.empty.attributes": "false"},
    )
"""
from __future__ import annotations
import logging
from dataclasses import asdict, dataclass
from typing import Any, List, Mapping, Optional, Union

from claims_mapper.config.mapper_config import (
    CLAIM_NAME_PROPERTY,
    DEFAULT_CLAIM_NAME,
    INCLUDE_EMPTY_ATTRIBUTES,
    INCLUDE_IN_ACCESS_TOKEN,
    INCLUDE_IN_ID_TOKEN,
    INCLUDE_IN_USERINFO,
    MapperConfig,
)
from .claim_attachment import TokenKind, TokenSink, attach_claim
from .client_resolution import ClientRef, UserSession, resolve_client
from .role_attributes import ClaimValue, RoleAttributeClaimBuilder

logger = logging.getLogger(__name__)

PROVIDER_ID = "oidc-client-role-attributes-mapper"
DISPLAY_TYPE = "Client Role Attributes"
DISPLAY_CATEGORY = "Token mapper"
PRIORITY = 100
HELP_TEXT = (
    "Adds the attributes of the user's roles on the current client to the token. "
    "Each role's attributes appear as a separate map inside the claim."
)

STRING_TYPE = "String"
BOOLEAN_TYPE = "boolean"


@dataclass(frozen=True)
class ConfigProperty:
    """Mapper configuration property as shown in the admin console."""
    name: str
    label: str
    type: str
    default_value: str
    help_text: str


def config_properties() -> List[ConfigProperty]:
    """Configuration properties this mapper understands."""
    return [
        ConfigProperty(
            name=CLAIM_NAME_PROPERTY,
            label="Claim Name",
            type=STRING_TYPE,
            default_value=DEFAULT_CLAIM_NAME,
            help_text="Name of the token claim that receives the role attributes",
        ),
        ConfigProperty(
            name=INCLUDE_EMPTY_ATTRIBUTES,
            label="Include Empty Attributes",
            type=BOOLEAN_TYPE,
            default_value="false",
            help_text="Also include roles and attributes that have no values",
        ),
        ConfigProperty(
            name=INCLUDE_IN_ACCESS_TOKEN,
            label="Add to access token",
            type=BOOLEAN_TYPE,
            default_value="true",
            help_text="Should the claim be added to the access token?",
        ),
        ConfigProperty(
            name=INCLUDE_IN_ID_TOKEN,
            label="Add to ID token",
            type=BOOLEAN_TYPE,
            default_value="true",
            help_text="Should the claim be added to the ID token?",
        ),
        ConfigProperty(
            name=INCLUDE_IN_USERINFO,
            label="Add to userinfo",
            type=BOOLEAN_TYPE,
            default_value="true",
            help_text="Should the claim be added to the userinfo response?",
        ),
    ]


def describe() -> dict:
    """Mapper descriptor as a JSON-ready dict."""
    return {
        "id": PROVIDER_ID,
        "displayType": DISPLAY_TYPE,
        "displayCategory": DISPLAY_CATEGORY,
        "helpText": HELP_TEXT,
        "priority": PRIORITY,
        "properties": [asdict(prop) for prop in config_properties()],
    }


@dataclass
class MappingResult:
    """Outcome of one mapper invocation.

    Attributes:
        attached: True if the claim was added to the token
        claim_name: Resolved claim name
        claim_value: Built claim value (empty when nothing was built)
        client: Client whose roles were read
        reason: Why the claim was left out
    """
    attached: bool
    claim_name: str
    claim_value: ClaimValue
    client: Optional[ClientRef] = None
    reason: Optional[str] = None


def _issued_for(sink: TokenSink) -> Optional[str]:
    # Only access tokens carry the clientId they are issued for
    if sink.kind is not TokenKind.ACCESS:
        return None
    getter = getattr(sink, "get", None)
    if getter is None:
        return None
    value = getter("azp")
    return value if isinstance(value, str) and value else None


class ClientRoleAttributesMapper:
    """Adds the user's client role attributes to tokens."""

    def __init__(
        self,
        role_source: Any,
        attribute_source: Any = None,
        client_lookup: Any = None,
        builder: Optional[RoleAttributeClaimBuilder] = None,
    ):
        """Initialize the mapper.

        Args:
            role_source: RoleSource giving the user's roles on a client
            attribute_source: Optional AttributeSource for role attributes
            client_lookup: Optional ClientLookup for the token audience fallback
            builder: Claim builder (defaults to one using attribute_source)
        """
        self.role_source = role_source
        self.client_lookup = client_lookup
        self.builder = builder or RoleAttributeClaimBuilder(attribute_source)

    def apply(
        self,
        sink: TokenSink,
        user_session: UserSession,
        config: Union[MapperConfig, Mapping[str, Any], None] = None,
        *,
        session_client: Optional[ClientRef] = None,
    ) -> MappingResult:
        """Add the role attributes claim to the token being built.

        Args:
            sink: Token being built
            user_session: Current user session
            config: MapperConfig or the host's raw config mapping
            session_client: Client of the current client-session context

        Returns:
            MappingResult describing what happened
        """
        claim_name = DEFAULT_CLAIM_NAME
        try:
            mapper_config = config if isinstance(config, MapperConfig) else MapperConfig.from_mapping(config)
            claim_name = mapper_config.claim_name

            if not mapper_config.includes(sink.kind):
                logger.debug(f"Claim '{claim_name}' disabled for {sink.kind.value} tokens")
                return MappingResult(False, claim_name, {}, reason="disabled for token kind")

            client = resolve_client(
                user_session,
                session_client=session_client,
                issued_for=_issued_for(sink),
                client_lookup=self.client_lookup,
            )
            if client is None:
                logger.warning(f"Could not determine client for user session: {user_session.id}")
                return MappingResult(False, claim_name, {}, reason="client not resolved")

            user = user_session.user
            logger.debug(
                f"Processing role attributes for user: {user.username}, client: {client.client_id}"
            )

            roles = list(self.role_source.get_client_roles(user, client) or [])
            if not roles:
                logger.debug(f"No client roles found for user: {user.username} in client: {client.client_id}")
                return MappingResult(False, claim_name, {}, client=client, reason="no client roles")

            claim_value = self.builder.build(
                roles,
                mapper_config.include_empty_attributes,
                claim_name=claim_name,
            )

            if not attach_claim(sink, claim_name, claim_value):
                logger.debug(f"No role attributes found for user: {user.username} in client: {client.client_id}")
                return MappingResult(False, claim_name, claim_value, client=client, reason="no role attributes")

            logger.debug(
                f"Successfully added role attributes claim '{claim_name}' with {len(claim_value)} roles "
                f"for user: {user.username}"
            )
            return MappingResult(True, claim_name, claim_value, client=client)

        except Exception as exc:
            # Log but never block token issuance
            session_id = getattr(user_session, "id", "unknown")
            logger.error(f"Error processing role attributes for user session: {session_id}", exc_info=True)
            return MappingResult(False, claim_name, {}, reason=f"error: {exc}")
