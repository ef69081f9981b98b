"""Role attributes -> token claim value.

Turns the roles a user holds on one client into the JSON-shaped claim

    {"<role>": {"<attribute>": ["<value>", ...], ...}, ...}

Usage:
    builder = RoleAttributeClaimBuilder()
    claim_value = builder.build(
        [Role("admin", {"department": ["IT", "Security"], "level": ["5"]})],
        include_empty_attributes=False,
    )
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

RoleAttributeSet = Dict[str, List[str]]
ClaimValue = Dict[str, RoleAttributeSet]


@dataclass(frozen=True)
class Role:
    """A client role and its attributes (None when the role has none)."""
    name: str
    attributes: Optional[Mapping[str, Optional[Sequence[str]]]] = field(default=None, hash=False)
    id: Optional[str] = None
    container_id: Optional[str] = None


@dataclass(frozen=True)
class RoleOutcome:
    """Result of processing one role.

    Attributes:
        role_name: Role name
        attributes: Filtered attributes, None when the role is left out
        reason: Why the role is left out
        error: True if attribute resolution failed
    """
    role_name: str
    attributes: Optional[RoleAttributeSet] = None
    reason: Optional[str] = None
    error: bool = False

    @property
    def included(self) -> bool:
        return self.attributes is not None

    @classmethod
    def resolved(cls, role_name: str, attributes: RoleAttributeSet) -> "RoleOutcome":
        return cls(role_name=role_name, attributes=attributes)

    @classmethod
    def omitted(cls, role_name: str, reason: str) -> "RoleOutcome":
        return cls(role_name=role_name, reason=reason)

    @classmethod
    def failed(cls, role_name: str, reason: str) -> "RoleOutcome":
        return cls(role_name=role_name, reason=reason, error=True)


def filter_attributes(
    attributes: Mapping[str, Optional[Sequence[str]]],
    include_empty_attributes: bool,
) -> RoleAttributeSet:
    """Copy attributes, dropping empty value lists unless asked to keep them.

    A None value list is always dropped. Values keep their order and are
    copied into new lists, so later changes to the source do not leak into
    an already built claim.

    Args:
        attributes: Attribute name -> values
        include_empty_attributes: Keep attributes with no values

    Returns:
        Filtered attribute mapping
    """
    filtered: RoleAttributeSet = {}
    for name, values in attributes.items():
        if values is None:
            continue
        if isinstance(values, str):
            values = [values]
        copied = list(values)
        if copied or include_empty_attributes:
            filtered[name] = copied
    return filtered


def _unique_by_name(roles: Iterable[Role]) -> List[Role]:
    seen = set()
    unique = []
    for role in roles:
        if role.name in seen:
            continue
        seen.add(role.name)
        unique.append(role)
    return unique


class RoleAttributeClaimBuilder:
    """Builds the role attributes claim value.

    Stateless apart from the optional attribute source, so one instance can
    serve concurrent requests.
    """

    def __init__(self, attribute_source: Any = None):
        """Initialize the builder.

        Args:
            attribute_source: Optional AttributeSource; when omitted each
                role's own ``attributes`` are used
        """
        self.attribute_source = attribute_source

    def build(
        self,
        roles: Iterable[Role],
        include_empty_attributes: bool = False,
        *,
        claim_name: Optional[str] = None,
    ) -> ClaimValue:
        """Build the claim value for a set of roles.

        Never raises: a role whose attributes cannot be resolved is logged
        and skipped, the worst case is an empty claim value.

        Args:
            roles: Roles the user holds on the client (deduplicated by name)
            include_empty_attributes: Keep roles and attributes without values
            claim_name: Target claim name, used for logging only

        Returns:
            Role name -> attribute mapping (possibly empty)
        """
        outcomes = self.collect(roles, include_empty_attributes)
        claim_value: ClaimValue = {
            outcome.role_name: outcome.attributes
            for outcome in outcomes
            if outcome.included
        }
        logger.debug(
            f"Built role attributes claim '{claim_name or '-'}' with {len(claim_value)} "
            f"of {len(outcomes)} roles (include_empty_attributes={include_empty_attributes})"
        )
        return claim_value

    def collect(self, roles: Iterable[Role], include_empty_attributes: bool = False) -> List[RoleOutcome]:
        """Process every role and return one outcome per unique role name."""
        return [
            self._process_role(role, include_empty_attributes)
            for role in _unique_by_name(roles)
        ]

    def _lookup(self, role: Role) -> Optional[Mapping[str, Optional[Sequence[str]]]]:
        if self.attribute_source is None:
            return role.attributes
        return self.attribute_source.get_role_attributes(role)

    def _process_role(self, role: Role, include_empty_attributes: bool) -> RoleOutcome:
        try:
            attributes = self._lookup(role)

            if attributes is None:
                if include_empty_attributes:
                    return RoleOutcome.resolved(role.name, {})
                return RoleOutcome.omitted(role.name, "no attributes")

            filtered = filter_attributes(attributes, include_empty_attributes)
            if filtered or include_empty_attributes:
                return RoleOutcome.resolved(role.name, filtered)
            return RoleOutcome.omitted(role.name, "no non-empty attributes")

        except Exception as exc:
            # Skip this role but keep going with the others
            logger.warning(f"Error processing attributes for role: {role.name}: {exc}", exc_info=True)
            return RoleOutcome.failed(role.name, str(exc))


def build_role_attributes_claim(
    roles: Iterable[Role],
    include_empty_attributes: bool = False,
    attribute_source: Any = None,
) -> ClaimValue:
    """Build the role attributes claim value in one call."""
    return RoleAttributeClaimBuilder(attribute_source).build(roles, include_empty_attributes)
