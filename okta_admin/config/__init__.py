"""Configuration module for the Okta admin client."""
from .settings import OktaConfig, load_settings, redact_token

__all__ = ["OktaConfig", "load_settings", "redact_token"]
