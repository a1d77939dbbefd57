"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from okta_admin import __version__
from okta_admin.core.okta.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_MAX_RATE_LIMIT_WAIT = 60.0


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

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info("Loaded %s from environment", env_var)
            return secret_value

    return None


@dataclass
class OktaConfig:
    """Okta client configuration container."""
    org_url: str
    api_token: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    max_rate_limit_wait: float = DEFAULT_MAX_RATE_LIMIT_WAIT
    user_agent: str = f"okta-admin/{__version__}"

    def __post_init__(self) -> None:
        self.org_url = validate_org_url(self.org_url)
        if not self.api_token:
            raise ConfigurationError("Okta API token is required")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must not be negative")
        if self.max_rate_limit_wait < 0:
            raise ConfigurationError("max_rate_limit_wait must not be negative")

    @property
    def api_base_url(self) -> str:
        return f"{self.org_url}/api/v1/"

    def __repr__(self) -> str:
        return (
            f"OktaConfig(org_url={self.org_url!r}, api_token={redact_token(self.api_token)!r}, "
            f"request_timeout={self.request_timeout}, max_retries={self.max_retries}, "
            f"max_rate_limit_wait={self.max_rate_limit_wait}, user_agent={self.user_agent!r})"
        )


def redact_token(token: Optional[str]) -> str:
    """Mask an API token for logs, keeping only the last four characters."""
    if not token:
        return ""
    if len(token) <= 8:
        return "***"
    return f"***{token[-4:]}"


def validate_org_url(org_url: str) -> str:
    """Normalize the org URL and reject anything but https (http only on localhost)."""
    if not org_url:
        raise ConfigurationError("Okta org URL is required (set OKTA_ORG_URL)")
    org_url = org_url.strip().rstrip("/")
    # Accept URLs that already carry the API prefix
    if org_url.endswith("/api/v1"):
        org_url = org_url[: -len("/api/v1")]
    parsed = urlparse(org_url)
    if not parsed.netloc:
        raise ConfigurationError(f"Invalid Okta org URL '{org_url}'")
    if parsed.scheme == "http" and parsed.hostname in ("localhost", "127.0.0.1"):
        return org_url
    if parsed.scheme != "https":
        raise ConfigurationError(f"Okta org URL must use https: '{org_url}'")
    return org_url


def _get_number(var_name: str, default: float, cast=float):
    value = os.environ.get(var_name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {var_name} must be a number, got '{value}'") from None


def load_settings() -> OktaConfig:
    """Load Okta client settings from environment and /run/secrets."""
    org_url = os.environ.get("OKTA_ORG_URL", "")
    api_token = _load_secret_from_file("okta_api_token", "OKTA_API_TOKEN")
    if not api_token:
        raise ConfigurationError(
            "OKTA_API_TOKEN not found. Provide it via /run/secrets/okta_api_token or the environment."
        )

    config = OktaConfig(
        org_url=org_url,
        api_token=api_token,
        request_timeout=_get_number("OKTA_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        max_retries=_get_number("OKTA_MAX_RETRIES", DEFAULT_MAX_RETRIES, int),
        max_rate_limit_wait=_get_number("OKTA_MAX_RATE_LIMIT_WAIT", DEFAULT_MAX_RATE_LIMIT_WAIT),
        user_agent=os.environ.get("OKTA_USER_AGENT") or f"okta-admin/{__version__}",
    )
    logger.info("Loaded Okta settings for %s", config.org_url)
    return config
