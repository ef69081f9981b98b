"""Core Business Logic Module

This module provides the claim mapping logic, independent of HTTP
frameworks (Flask) and of the Keycloak Admin API.

Architecture:
    - Pure Python (no Flask dependencies in core logic)
    - Host data reaches the mapper through small protocols (sources.py)
    - Reusable across different interfaces (HTTP service, CLI, embedding)

Module Structure:
    - keycloak/             : Keycloak Admin API client and host adapters
    - role_attributes.py    : Role attributes -> claim value builder
    - claim_attachment.py   : Token kinds, token sinks, attachment policy
    - client_resolution.py  : Which client's roles to read for a token
    - mapper.py             : ClientRoleAttributesMapper (orchestration + descriptor)
    - sources.py            : RoleSource / AttributeSource / ClientLookup protocols

Usage Pattern:
    These modules are NOT auto-imported; import explicitly when needed:
        from claims_mapper.core.role_attributes import RoleAttributeClaimBuilder, Role
        from claims_mapper.core.claim_attachment import ClaimSetSink, TokenKind
        from claims_mapper.core.mapper import ClientRoleAttributesMapper
"""
