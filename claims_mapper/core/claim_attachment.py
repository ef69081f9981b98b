"""Claim attachment policy.

The builder does not know which token it feeds. The caller passes a sink
for the token being built (access token, ID token or userinfo response) and
the attachment call is the same for all of them.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class TokenKind(str, Enum):
    """Token representations the host builds."""
    ACCESS = "access"
    ID = "id"
    USERINFO = "userinfo"

    @classmethod
    def parse(cls, value: str) -> "TokenKind":
        """Parse a token kind name (accepts "access_token", "id_token" too).

        Raises:
            ValueError: If the name is not a known token kind
        """
        normalized = (value or "").strip().lower()
        if normalized.endswith("_token"):
            normalized = normalized[: -len("_token")]
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"Unknown token kind: {value!r}")


class TokenSink(Protocol):
    """In-progress token that accepts extra claims."""
    kind: TokenKind

    def set_claim(self, name: str, value: Any) -> None:
        ...


class ClaimSetSink:
    """Token sink backed by the token's claim dictionary.

    Usage:
        claims = {"sub": "123", "azp": "web-app"}
        sink = ClaimSetSink(claims, TokenKind.ACCESS)
        attach_claim(sink, "role_attributes", claim_value)
    """

    def __init__(self, claims: Optional[Dict[str, Any]] = None, kind: TokenKind = TokenKind.ACCESS):
        self.claims: Dict[str, Any] = claims if claims is not None else {}
        self.kind = kind

    def set_claim(self, name: str, value: Any) -> None:
        self.claims[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self.claims.get(name, default)

    def __repr__(self) -> str:
        return f"ClaimSetSink(kind={self.kind.value}, claims={sorted(self.claims)})"


def attach_claim(sink: TokenSink, claim_name: str, claim_value: Dict[str, Any]) -> bool:
    """Attach the claim value to the token, unless it is empty.

    Args:
        sink: Token being built
        claim_name: Resolved claim name
        claim_value: Role name -> attribute mapping

    Returns:
        True if the claim was attached, False if it was omitted
    """
    if not claim_value:
        logger.debug(f"Empty claim value; '{claim_name}' not attached to {sink.kind.value} token")
        return False

    sink.set_claim(claim_name, claim_value)
    return True
