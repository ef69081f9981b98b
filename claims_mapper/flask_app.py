"""Flask application factory and bootstrap.

This module provides the create_app() factory function for the
claim-enrichment service.
"""
from __future__ import annotations
from typing import Optional

from flask import Flask

from claims_mapper.config import AppConfig, load_settings
from claims_mapper.logging_config import configure_logging


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings to use (loaded from the environment when omitted)

    Raises:
        ValueError: If the service account secret is missing outside demo mode
    """
    if cfg is None:
        cfg = load_settings()

    configure_logging(cfg.log_level)

    # Missing service account secret is a startup error, not a per-request 500
    cfg.service_client_secret_resolved

    app = Flask(__name__)

    # Store config for easy access in routes
    app.config["APP_CONFIG"] = cfg
    app.config["DEMO_MODE"] = cfg.demo_mode

    # Register blueprints
    from claims_mapper.api import claims, errors, health

    app.register_blueprint(health.bp)
    app.register_blueprint(claims.bp, url_prefix="/api/v1")

    # Register error handlers
    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    app.logger.info(f"[flask_app] Mode={mode_label}; realm={cfg.keycloak_realm}; claim={cfg.claim_name}")

    if cfg.demo_mode:
        app.logger.warning("[flask_app] Demo mode active - do not deploy with demo credentials")

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
