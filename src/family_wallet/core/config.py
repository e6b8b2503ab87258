"""
Configuration for Family Wallet.

Environment variables:
- FW_STATE_DIR: Directory of the on-disk instance store
- FW_AUDIT_DIR: Directory of the JSONL event log
- FW_TTL_THRESHOLD_SECONDS: Renew when remaining lifetime drops below this
- FW_TTL_BUMP_SECONDS: Window the lifetime is extended to on renewal
- FW_IDENTITY_KEYS: Comma-separated identity=secret pairs
- FW_LOG_LEVEL: Logging level for the CLI
"""

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

from family_wallet.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Renewal window: extend when less than ~1 day remains, up to ~30 days
DEFAULT_TTL_THRESHOLD_SECONDS = 86_400
DEFAULT_TTL_BUMP_SECONDS = 2_592_000

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LifetimePolicy(BaseModel):
    """Fixed renewal window applied on every mutating call."""

    threshold_seconds: int = Field(default=DEFAULT_TTL_THRESHOLD_SECONDS, gt=0)
    bump_seconds: int = Field(default=DEFAULT_TTL_BUMP_SECONDS, gt=0)


class Settings(BaseModel):
    """Resolved runtime settings."""

    state_dir: Path = Path("var/wallet")
    audit_dir: Path = Path("var/audit")
    lifetime: LifetimePolicy = Field(default_factory=LifetimePolicy)
    identity_keys: dict[str, str] = Field(default_factory=dict)
    log_level: str = "WARNING"


def _int_from_env(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}", env_var=env_var)
    if value <= 0:
        raise ConfigurationError(f"{env_var} must be positive", env_var=env_var)
    return value


def parse_identity_keys(raw: str) -> dict[str, str]:
    """
    Parse comma-separated identity=secret pairs.

    Raises:
        ConfigurationError: If a pair is malformed
    """
    keys: dict[str, str] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        identity, sep, secret = pair.partition("=")
        identity, secret = identity.strip(), secret.strip()
        if not sep or not identity or not secret:
            raise ConfigurationError(
                "FW_IDENTITY_KEYS entries must look like identity=secret",
                env_var="FW_IDENTITY_KEYS",
            )
        keys[identity] = secret
    return keys


def load_settings() -> Settings:
    """
    Load settings from environment.

    Raises:
        ConfigurationError: If a variable is malformed or out of range
    """
    threshold = _int_from_env("FW_TTL_THRESHOLD_SECONDS", DEFAULT_TTL_THRESHOLD_SECONDS)
    bump = _int_from_env("FW_TTL_BUMP_SECONDS", DEFAULT_TTL_BUMP_SECONDS)
    if threshold > bump:
        raise ConfigurationError(
            "FW_TTL_THRESHOLD_SECONDS cannot exceed FW_TTL_BUMP_SECONDS",
            details={"threshold": threshold, "bump": bump},
        )

    identity_keys = parse_identity_keys(os.getenv("FW_IDENTITY_KEYS", ""))
    if identity_keys:
        logger.info(f"Loaded {len(identity_keys)} identity keys from environment")

    log_level = os.getenv("FW_LOG_LEVEL", "WARNING").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level: {log_level}", env_var="FW_LOG_LEVEL")

    return Settings(
        state_dir=Path(os.getenv("FW_STATE_DIR", "var/wallet")),
        audit_dir=Path(os.getenv("FW_AUDIT_DIR", "var/audit")),
        lifetime=LifetimePolicy(threshold_seconds=threshold, bump_seconds=bump),
        identity_keys=identity_keys,
        log_level=log_level,
    )
