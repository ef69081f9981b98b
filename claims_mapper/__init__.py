"""Client role attributes claim mapper.

To use the mapper as a library:
    from claims_mapper.core.mapper import ClientRoleAttributesMapper

To use the claim builder on its own:
    from claims_mapper.core.role_attributes import RoleAttributeClaimBuilder, Role

To run the claim-enrichment service:
    from claims_mapper.flask_app import create_app
"""
# Note: We don't import flask_app by default to avoid Flask dependency
# for callers that only embed claims_mapper.core
