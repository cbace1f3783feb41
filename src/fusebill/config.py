"""
Configuration management.

All configuration keys for the Fusebill client live here.

Key invariants:
- mode selects the host pair (production or staging) for both APIs
- token authenticates the public API; username/password the private API
- secrets may come from the environment instead of the file
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .api_client.client import MODE_PRODUCTION, MODE_STAGING


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class FusebillConfig:
    """Fusebill connection settings."""

    mode: str = MODE_STAGING
    # Basic auth value for the public API
    token: str = ""
    # Login for the private API (write-offs)
    username: str = ""
    password: str = ""
    # Per-request timeout (seconds)
    timeout: float = 5

    def has_token(self) -> bool:
        return bool(self.token)

    def has_login(self) -> bool:
        return bool(self.username and self.password)

    def __repr__(self) -> str:
        return f"FusebillConfig(mode={self.mode!r}, username={self.username!r})"


@dataclass
class Config:
    """Application configuration."""

    fusebill: FusebillConfig = field(default_factory=FusebillConfig)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if self.fusebill.mode not in (MODE_PRODUCTION, MODE_STAGING):
            errors.append(
                f"fusebill.mode must be '{MODE_PRODUCTION}' or '{MODE_STAGING}', "
                f"got '{self.fusebill.mode}'"
            )
        if self.fusebill.timeout <= 0:
            errors.append("fusebill.timeout must be positive")
        if not self.fusebill.has_token() and not self.fusebill.has_login():
            errors.append("fusebill.token or fusebill.username/password is required")

        return errors


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - FUSEBILL_MODE (production/staging)
    - FUSEBILL_TOKEN
    - FUSEBILL_USERNAME
    - FUSEBILL_PASSWORD
    - FUSEBILL_TIMEOUT (request timeout in seconds)
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    fusebill_data = data.get("fusebill", {}) or {}

    timeout_raw = os.environ.get("FUSEBILL_TIMEOUT", fusebill_data.get("timeout", 5))
    try:
        timeout = float(timeout_raw)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid fusebill.timeout: {timeout_raw!r}") from e

    fusebill = FusebillConfig(
        mode=os.environ.get("FUSEBILL_MODE", fusebill_data.get("mode", MODE_STAGING)),
        token=os.environ.get("FUSEBILL_TOKEN", fusebill_data.get("token", "")) or "",
        username=os.environ.get("FUSEBILL_USERNAME", fusebill_data.get("username", "")) or "",
        password=os.environ.get("FUSEBILL_PASSWORD", fusebill_data.get("password", "")) or "",
        timeout=timeout,
    )

    return Config(fusebill=fusebill)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# Fusebill client configuration
#
# Secrets can be left empty here and supplied via the environment:
# FUSEBILL_TOKEN, FUSEBILL_USERNAME, FUSEBILL_PASSWORD

fusebill:
  mode: "staging"              # production or staging
  token: ""                    # Basic auth value for the public API (balances)
  username: ""                 # Private API login (write-offs)
  password: ""
  timeout: 5                   # Per-request timeout in seconds
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
