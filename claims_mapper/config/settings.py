"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .mapper_config import DEFAULT_CLAIM_NAME, MapperConfig, resolve_claim_name


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Keycloak
    keycloak_url: str = ""
    keycloak_realm: str = "demo"
    keycloak_service_realm: str = "demo"
    keycloak_issuer: str = ""
    keycloak_server_url: str = ""

    # Service Account (reads users, sessions, client roles)
    keycloak_service_client_id: str = "automation-cli"
    keycloak_service_client_secret: str = ""

    # Mapper defaults (overridable per request)
    claim_name: str = DEFAULT_CLAIM_NAME
    include_empty_attributes: bool = False

    # Logging
    log_level: str = "INFO"

    @property
    def service_client_secret_resolved(self) -> str:
        """Get Keycloak service account client secret with smart fallback.

        Priority:
        1. Demo mode: hardcoded "demo-service-secret"
        2. Configured value in keycloak_service_client_secret
        3. Docker secrets: /run/secrets/keycloak_service_client_secret
        4. Environment variable: KEYCLOAK_SERVICE_CLIENT_SECRET

        Returns:
            Client secret string

        Raises:
            ValueError: If secret not found in production mode
        """
        if self.demo_mode:
            return "demo-service-secret"

        if self.keycloak_service_client_secret:
            return self.keycloak_service_client_secret

        for secret_name in ["keycloak_service_client_secret", "keycloak-service-client-secret"]:
            secret_path = Path("/run/secrets") / secret_name
            if secret_path.exists():
                secret = secret_path.read_text().strip()
                if secret:
                    return secret

        secret = os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET")
        if secret:
            return secret

        raise ValueError(
            "KEYCLOAK_SERVICE_CLIENT_SECRET not found. "
            "Set DEMO_MODE=true or provide secret via Docker secrets or environment variable."
        )

    def mapper_config(self, overrides: Optional[dict] = None) -> MapperConfig:
        """Build the per-invocation mapper config, seeded with these defaults."""
        return MapperConfig.from_mapping(
            overrides,
            default_claim_name=self.claim_name,
            default_include_empty=self.include_empty_attributes,
        )


def _get_or_generate(var_name: str, demo_default: Optional[str] = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        print(f"[demo-mode] Using default for {var_name}")
        os.environ[var_name] = demo_default
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    # Keycloak service client secret
    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET"
    ) or ""
    if not keycloak_service_client_secret:
        keycloak_service_client_secret = _get_or_generate(
            "KEYCLOAK_SERVICE_CLIENT_SECRET",
            demo_default=(os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET_DEMO") or "demo-service-secret"),
            demo_mode=demo_mode
        )

    # Keycloak URLs
    keycloak_url = _get_or_generate(
        "KEYCLOAK_URL",
        demo_default="http://127.0.0.1:8080",
        demo_mode=demo_mode
    )
    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "demo")
    keycloak_service_realm = os.environ.get("KEYCLOAK_SERVICE_REALM", keycloak_realm)

    keycloak_issuer = _get_or_generate(
        "KEYCLOAK_ISSUER",
        demo_default=f"http://localhost:8080/realms/{keycloak_realm}",
        demo_mode=demo_mode
    )
    keycloak_server_url = os.environ.get("KEYCLOAK_SERVER_URL", keycloak_issuer)

    keycloak_service_client_id = _get_or_generate(
        "KEYCLOAK_SERVICE_CLIENT_ID",
        demo_default="automation-cli",
        demo_mode=demo_mode
    )

    # Mapper defaults
    claim_name = resolve_claim_name(os.environ.get("ROLE_ATTRIBUTES_CLAIM_NAME"))
    include_empty_attributes = os.environ.get("ROLE_ATTRIBUTES_INCLUDE_EMPTY", "false").strip().lower() == "true"

    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if demo_mode else "INFO").strip().upper() or "INFO"

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; realm={keycloak_realm}; claim={claim_name}")

    if demo_mode:
        print("[settings] WARNING: Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_service_realm=keycloak_service_realm,
        keycloak_issuer=keycloak_issuer,
        keycloak_server_url=keycloak_server_url,
        keycloak_service_client_id=keycloak_service_client_id,
        keycloak_service_client_secret=keycloak_service_client_secret,
        claim_name=claim_name,
        include_empty_attributes=include_empty_attributes,
        log_level=log_level,
    )
