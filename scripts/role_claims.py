"""Command-line helper for the client role attributes mapper.

Commands:
    describe  Print the mapper descriptor (provider id, config properties)
    build     Build the claim value from a JSON file of roles (no Keycloak needed)
    preview   Show the claim a user would get for a client on a live realm
"""
from __future__ import annotations
import argparse
import json
import os
import sys
from pathlib import Path

import requests

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from claims_mapper.config.mapper_config import (
    CLAIM_NAME_PROPERTY,
    INCLUDE_EMPTY_ATTRIBUTES,
    MapperConfig,
)
from claims_mapper.core.claim_attachment import TokenKind
from claims_mapper.core.enrichment import ClaimEnrichmentService
from claims_mapper.core.keycloak import (
    KeycloakError,
    UserNotFoundError,
    create_service_account_client,
)
from claims_mapper.core.mapper import describe
from claims_mapper.core.role_attributes import Role, RoleAttributeClaimBuilder
from claims_mapper.logging_config import configure_logging


def _mapper_config(args: argparse.Namespace) -> MapperConfig:
    raw = {INCLUDE_EMPTY_ATTRIBUTES: "true" if args.include_empty else "false"}
    if args.claim_name is not None:
        raw[CLAIM_NAME_PROPERTY] = args.claim_name
    return MapperConfig.from_mapping(raw)


def load_roles(path: Path) -> list[Role]:
    """Read roles from a JSON object of role name -> attributes (or null)."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Roles file must contain a JSON object of role name -> attributes")
    return [Role(name=name, attributes=attributes) for name, attributes in payload.items()]


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Client role attributes mapper helper")
    parser.add_argument("--kc-url", default=os.environ.get("KEYCLOAK_URL", "http://localhost:8080"))
    parser.add_argument("--auth-realm", default=os.environ.get("KEYCLOAK_SERVICE_REALM", "demo"))
    parser.add_argument("--svc-client-id", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "automation-cli"))
    parser.add_argument("--svc-client-secret", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"))
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "WARNING"))

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("describe")

    sb = sub.add_parser("build")
    sb.add_argument("--roles-file", required=True, type=Path)
    sb.add_argument("--claim-name", default=None)
    sb.add_argument("--include-empty", action="store_true")

    sp = sub.add_parser("preview")
    sp.add_argument("--realm", default=os.environ.get("KEYCLOAK_REALM", "demo"))
    sp.add_argument("--username")
    sp.add_argument("--user-id")
    sp.add_argument("--client-id")
    sp.add_argument("--session-id")
    sp.add_argument("--token-kind", default="access", choices=[kind.value for kind in TokenKind])
    sp.add_argument("--claim-name", default=None)
    sp.add_argument("--include-empty", action="store_true")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "describe":
        _print_json(describe())
        return 0

    if args.cmd == "build":
        config = _mapper_config(args)
        try:
            roles = load_roles(args.roles_file)
        except (OSError, ValueError) as e:
            parser.error(f"Cannot read roles file: {e}")
        claim_value = RoleAttributeClaimBuilder().build(
            roles, config.include_empty_attributes, claim_name=config.claim_name
        )
        _print_json({config.claim_name: claim_value} if claim_value else {})
        return 0

    # preview
    if not args.username and not args.user_id:
        parser.error("--username or --user-id is required")
    if not args.svc_client_secret:
        parser.error("Missing service account secret")

    config = _mapper_config(args)
    claims: dict = {}
    if args.client_id and args.token_kind == TokenKind.ACCESS.value:
        claims["azp"] = args.client_id

    try:
        kc_client = create_service_account_client(
            args.kc_url, args.auth_realm, args.svc_client_id, args.svc_client_secret
        )
        service = ClaimEnrichmentService(kc_client, args.realm)
        result = service.enrich(
            claims,
            TokenKind.parse(args.token_kind),
            config,
            username=args.username,
            user_id=args.user_id,
            client_id=args.client_id,
            session_id=args.session_id,
        )
    except UserNotFoundError as e:
        print(f"[preview] {e}", file=sys.stderr)
        return 1
    except (KeycloakError, requests.RequestException) as e:
        print(f"[preview] Keycloak error: {e}", file=sys.stderr)
        return 2

    if not result.attached:
        print(f"[preview] Claim '{result.claim_name}' not added: {result.reason}", file=sys.stderr)

    _print_json({
        "claim_added": result.attached,
        "claim_name": result.claim_name,
        "client_id": result.client.client_id if result.client else None,
        "claims": claims,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
