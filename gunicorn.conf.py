"""Gunicorn configuration for the claim-enrichment service.

Secrets come from /run/secrets (Docker secrets) or the environment; see
claims_mapper.config.settings. Workers build the app through the factory.
"""
import os

wsgi_app = "claims_mapper.flask_app:create_app()"
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:5000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()


def post_fork(server, worker):
    """Report where the service account secret will be read from."""
    from pathlib import Path

    secret_file = Path("/run/secrets") / "keycloak_service_client_secret"
    if secret_file.exists():
        worker.log.info("Using Keycloak service client secret from /run/secrets")
    elif os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"):
        worker.log.info("Using Keycloak service client secret from environment")
    elif os.environ.get("DEMO_MODE", "false").lower() == "true":
        worker.log.warning("DEMO_MODE=true: using demo service client secret")
    else:
        worker.log.error("KEYCLOAK_SERVICE_CLIENT_SECRET not found; enrichment requests will fail")
