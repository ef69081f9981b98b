"""Claim enrichment endpoint.

POST /api/v1/claims/role-attributes

Request:
    {
        "username": "alice",            # or "user_id"
        "token_kind": "access",         # access | id | userinfo
        "claims": {"sub": "...", "azp": "web-app"},
        "client_id": "web-app",         # optional, client-session context
        "session_id": "…",              # optional
        "config": {"claim.name": "role_attributes", "include.empty.attributes": "false"}
    }

Response:
    {"claims": {...}, "claim_added": true, "claim_name": "role_attributes",
     "client_id": "web-app", "reason": null}

Enrichment problems never turn into 5xx: the claims come back unchanged
with ``claim_added: false`` and a reason.
"""
from __future__ import annotations
import requests
from flask import Blueprint, abort, current_app, jsonify, request

from claims_mapper.core.claim_attachment import TokenKind
from claims_mapper.core.enrichment import ClaimEnrichmentService
from claims_mapper.core.keycloak import KeycloakError, UserNotFoundError, create_service_account_client

from .decorators import require_oauth_token

bp = Blueprint("claims", __name__)

_EXTENSION_KEY = "claims_mapper.enrichment"


def get_enrichment_service() -> ClaimEnrichmentService:
    """Return the app's enrichment service, authenticating on first use."""
    service = current_app.extensions.get(_EXTENSION_KEY)
    if service is None:
        cfg = current_app.config["APP_CONFIG"]
        kc_client = create_service_account_client(
            cfg.keycloak_url,
            cfg.keycloak_service_realm,
            cfg.keycloak_service_client_id,
            cfg.service_client_secret_resolved,
        )
        service = ClaimEnrichmentService(kc_client, cfg.keycloak_realm)
        current_app.extensions[_EXTENSION_KEY] = service
    return service


def _parse_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="JSON object body required")

    claims = payload.get("claims", {})
    if not isinstance(claims, dict):
        abort(400, description="'claims' must be a JSON object")

    config = payload.get("config")
    if config is not None and not isinstance(config, dict):
        abort(400, description="'config' must be a JSON object")

    if not payload.get("username") and not payload.get("user_id"):
        abort(400, description="'username' or 'user_id' is required")

    try:
        token_kind = TokenKind.parse(payload.get("token_kind") or "access")
    except ValueError as e:
        abort(400, description=str(e))

    return {
        "claims": claims,
        "config": config,
        "token_kind": token_kind,
        "username": payload.get("username"),
        "user_id": payload.get("user_id"),
        "client_id": payload.get("client_id"),
        "session_id": payload.get("session_id"),
    }


@bp.route("/claims/role-attributes", methods=["POST"])
@require_oauth_token
def role_attributes():
    """Add the role attributes claim to a token claim set."""
    cfg = current_app.config["APP_CONFIG"]
    body = _parse_body()
    mapper_config = cfg.mapper_config(body["config"])
    claims = body["claims"]

    try:
        result = get_enrichment_service().enrich(
            claims,
            body["token_kind"],
            mapper_config,
            username=body["username"],
            user_id=body["user_id"],
            client_id=body["client_id"],
            session_id=body["session_id"],
        )
    except UserNotFoundError as e:
        abort(404, description=str(e))
    except (KeycloakError, requests.RequestException) as e:
        current_app.logger.error(f"Role attributes enrichment failed: {e}", exc_info=True)
        return jsonify({
            "claims": claims,
            "claim_added": False,
            "claim_name": mapper_config.claim_name,
            "client_id": None,
            "reason": "identity provider unavailable",
        }), 200

    return jsonify({
        "claims": claims,
        "claim_added": result.attached,
        "claim_name": result.claim_name,
        "client_id": result.client.client_id if result.client else None,
        "reason": result.reason,
    }), 200
