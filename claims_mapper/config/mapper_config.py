"""Per-invocation mapper configuration.

The host hands the mapper its configuration as a flat mapping of string
options (the way the admin console stores protocol mapper config). This
module turns that mapping into an immutable value built once per token.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from claims_mapper.core.claim_attachment import TokenKind

DEFAULT_CLAIM_NAME = "role_attributes"

# Configuration property keys
CLAIM_NAME_PROPERTY = "claim.name"
INCLUDE_EMPTY_ATTRIBUTES = "include.empty.attributes"
INCLUDE_IN_ACCESS_TOKEN = "access.token.claim"
INCLUDE_IN_ID_TOKEN = "id.token.claim"
INCLUDE_IN_USERINFO = "userinfo.token.claim"

_INCLUDE_IN_TOKEN_KEYS = {
    TokenKind.ACCESS: INCLUDE_IN_ACCESS_TOKEN,
    TokenKind.ID: INCLUDE_IN_ID_TOKEN,
    TokenKind.USERINFO: INCLUDE_IN_USERINFO,
}


def resolve_claim_name(raw: Optional[str], default: str = DEFAULT_CLAIM_NAME) -> str:
    """Return the trimmed claim name, or the default when missing or blank."""
    if raw is None:
        return default
    trimmed = str(raw).strip()
    return trimmed or default


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() == "true"


@dataclass(frozen=True)
class MapperConfig:
    """Immutable mapper configuration.

    Attributes:
        claim_name: Token claim under which the role attributes are attached
        include_empty_attributes: Keep roles and attributes without values
        include_in_access_token: Attach to access tokens
        include_in_id_token: Attach to ID tokens
        include_in_userinfo: Attach to userinfo responses
    """
    claim_name: str = DEFAULT_CLAIM_NAME
    include_empty_attributes: bool = False
    include_in_access_token: bool = True
    include_in_id_token: bool = True
    include_in_userinfo: bool = True

    @classmethod
    def from_mapping(
        cls,
        config: Optional[Mapping[str, Any]],
        *,
        default_claim_name: str = DEFAULT_CLAIM_NAME,
        default_include_empty: bool = False,
    ) -> "MapperConfig":
        """Build configuration from the host's string options.

        Args:
            config: Mapper config as stored by the host (may be None)
            default_claim_name: Claim name used when the option is missing or blank
            default_include_empty: Flag value used when the option is missing

        Returns:
            MapperConfig instance
        """
        config = config or {}

        include_empty = default_include_empty
        if INCLUDE_EMPTY_ATTRIBUTES in config:
            include_empty = _is_true(config.get(INCLUDE_EMPTY_ATTRIBUTES))

        # Token toggles default to on, like the host's include-in-token options
        toggles = {}
        for kind, key in _INCLUDE_IN_TOKEN_KEYS.items():
            toggles[kind] = _is_true(config[key]) if key in config else True

        return cls(
            claim_name=resolve_claim_name(config.get(CLAIM_NAME_PROPERTY), default_claim_name),
            include_empty_attributes=include_empty,
            include_in_access_token=toggles[TokenKind.ACCESS],
            include_in_id_token=toggles[TokenKind.ID],
            include_in_userinfo=toggles[TokenKind.USERINFO],
        )

    def includes(self, kind: TokenKind) -> bool:
        """Check whether the claim should be attached to the given token kind."""
        if kind is TokenKind.ACCESS:
            return self.include_in_access_token
        if kind is TokenKind.ID:
            return self.include_in_id_token
        return self.include_in_userinfo
