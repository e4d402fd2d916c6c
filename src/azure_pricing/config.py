"""
Client configuration.

ClientConfig can be built in code or loaded from a YAML file:

    azure_pricing:
      base_url: ${AZURE_PRICING_BASE_URL:-https://prices.azure.com/api/retail/prices}
      retry_max: 3
      retry_wait_min: 1
      retry_wait_max: 30
      timeout: 60
      user_agent: azure-pricing-client
      max_pages: 1000

Environment variables ARE supported using ${VAR_NAME} and
${VAR_NAME:-default} syntax in YAML files.
"""

import logging
import math
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from azure_pricing.errors.exceptions import InvalidConfigError
from azure_pricing.resilience.retry import (
    DEFAULT_RETRY_MAX,
    DEFAULT_RETRY_WAIT_MAX,
    DEFAULT_RETRY_WAIT_MIN,
    RetryConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://prices.azure.com/api/retail/prices"
DEFAULT_TIMEOUT = 60.0
DEFAULT_USER_AGENT = "azure-pricing-client"
DEFAULT_MAX_PAGES = 1000

CONFIG_SECTION = "azure_pricing"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(([^}]*))?)?\}")


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return _ENV_VAR_PATTERN.sub(replacer, data)
    else:
        return data


@dataclass
class ClientConfig:
    """
    Configuration for AzurePricingClient.

    Durations are in seconds. Validated once, when the client is built.

    Attributes:
        base_url: Retail Prices API endpoint; empty means the default
        retry_max: Retries after the first attempt (total attempts = retry_max + 1)
        retry_wait_min: Lower bound of the exponential backoff
        retry_wait_max: Upper bound of any backoff, including Retry-After hints
        timeout: Per-request timeout
        user_agent: User-Agent header value; empty means the default
        max_pages: Pagination safety limit per get_prices call
        logger: Logger or LoggerAdapter for retry and failure events
            (default: discard everything)
    """

    base_url: str = DEFAULT_BASE_URL
    retry_max: int = DEFAULT_RETRY_MAX
    retry_wait_min: float = DEFAULT_RETRY_WAIT_MIN
    retry_wait_max: float = DEFAULT_RETRY_WAIT_MAX
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    max_pages: int = DEFAULT_MAX_PAGES
    logger: logging.Logger | logging.LoggerAdapter | None = field(
        default=None, repr=False, compare=False
    )

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        try:
            self.retry_max = int(self.retry_max)
            self.retry_wait_min = float(self.retry_wait_min)
            self.retry_wait_max = float(self.retry_wait_max)
            self.timeout = float(self.timeout)
            self.max_pages = int(self.max_pages)
        except (TypeError, ValueError) as e:
            raise InvalidConfigError(f"invalid numeric setting: {e}", cause=e) from e

        self.base_url = str(self.base_url or "").strip() or DEFAULT_BASE_URL
        self.user_agent = str(self.user_agent or "").strip() or DEFAULT_USER_AGENT

    def validate(self) -> None:
        """
        Check the configuration.

        Raises:
            InvalidConfigError: On the first rule that fails
        """
        for name in ("timeout", "retry_wait_min", "retry_wait_max"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidConfigError(f"{name} must be a finite number")
        if self.retry_max < 0:
            raise InvalidConfigError("retry_max must be >= 0")
        if self.timeout <= 0:
            raise InvalidConfigError("timeout must be > 0")
        if self.retry_wait_min < 0:
            raise InvalidConfigError("retry_wait_min must be >= 0")
        if self.retry_wait_min > self.retry_wait_max:
            raise InvalidConfigError("retry_wait_min must be <= retry_wait_max")
        if self.max_pages < 1:
            raise InvalidConfigError("max_pages must be >= 1")
        if not self.base_url.startswith(("http://", "https://")):
            raise InvalidConfigError(
                f"base_url must start with http:// or https://, got: {self.base_url!r}"
            )

    def retry_config(self, **overrides: Any) -> RetryConfig:
        """RetryConfig for the retry engine, with optional policy/backoff overrides."""
        return RetryConfig(
            retry_max=self.retry_max,
            wait_min=self.retry_wait_min,
            wait_max=self.retry_wait_max,
            **{k: v for k, v in overrides.items() if v is not None},
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        allowed = {f.name for f in fields(cls)} - {"logger"}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise InvalidConfigError(f"unknown settings: {', '.join(unknown)}")
        return cls(**data)


def load_config(
    config_path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
) -> ClientConfig:
    """
    Load client configuration from the ``azure_pricing:`` section of a YAML file.

    A missing file (or section) yields the defaults. Overrides (e.g. from
    command-line flags) are applied on top; None values are ignored.

    Raises:
        InvalidConfigError: Unknown keys, non-numeric values, or a malformed file
    """
    section: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        try:
            yaml_data = _expand_env_vars(load_yaml(path))
        except yaml.YAMLError as e:
            raise InvalidConfigError(f"cannot parse {path}", cause=e) from e

        if not isinstance(yaml_data, dict):
            raise InvalidConfigError(f"{path}: expected a mapping at top level")
        section = yaml_data.get(CONFIG_SECTION) or {}
        if not isinstance(section, dict):
            raise InvalidConfigError(f"{path}: '{CONFIG_SECTION}' must be a mapping")
        logger.debug(
            "Loaded configuration file",
            extra={"operation": "load_config", "config_path": str(path)},
        )

    if overrides:
        section = {**section, **{k: v for k, v in overrides.items() if v is not None}}

    return ClientConfig.from_dict(section)


__all__ = [
    "CONFIG_SECTION",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_MAX_PAGES",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "load_config",
]
