"""Configuration module for the claims mapper."""
from .mapper_config import MapperConfig, resolve_claim_name, DEFAULT_CLAIM_NAME
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings", "MapperConfig", "resolve_claim_name", "DEFAULT_CLAIM_NAME"]
