"""Configuration loading for s3lite.

Supports two configuration sources:
1. Environment variables (for CI/CD) - takes priority
2. s3lite.json file (for local development)

Environment Variable Format:
    S3LITE_BUCKET=xxx
    S3LITE_ACCESS_KEY=xxx
    S3LITE_SECRET_KEY=xxx
    S3LITE_ENDPOINT=xxx            (optional, default s3.amazonaws.com)
    S3LITE_ADDRESSING_STYLE=xxx    (optional, virtual or path)
    S3LITE_REGION=xxx              (optional, used for multipart uploads)
    S3LITE_INSECURE=1              (optional, use http)

JSON File Format:
    {
        "default": {
            "bucket_name": "media",
            "aws_access_key_id": "xxx",
            "aws_secret_access_key": "xxx",
            "endpoint": "s3.us-west-000.backblazeb2.com",
            "addressing_style": "path"
        }
    }
"""

import json
import os
from pathlib import Path
from typing import Optional

from s3lite.errors import ConfigError
from s3lite.models import DEFAULT_ENDPOINT, DEFAULT_REGION, ClientConfig, Credentials

DEFAULT_CONFIG_PATH = "s3lite.json"
DEFAULT_PROFILE = "default"
ENV_PREFIX = "S3LITE_"

# Required fields for a profile
REQUIRED_FIELDS = [
    "bucket_name",
    "aws_access_key_id",
    "aws_secret_access_key",
]

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_from_json(config_path: str) -> dict[str, ClientConfig]:
    """Load client configurations from a JSON file.

    Args:
        config_path: Path to the JSON file.

    Returns:
        Dictionary mapping profile names to ClientConfig objects.
        Only enabled profiles are included.

    Raises:
        ConfigError: If file doesn't exist, contains invalid JSON,
                    is missing required fields or holds an invalid
                    bucket name.
    """
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e

    profiles: dict[str, ClientConfig] = {}

    for name, config in data.items():
        # Skip disabled profiles
        if not config.get("enabled", True):
            continue

        for field in REQUIRED_FIELDS:
            if field not in config:
                raise ConfigError(
                    f"Missing required field '{field}' for profile '{name}'"
                )

        profiles[name] = ClientConfig(
            bucket_name=config["bucket_name"],
            credentials=Credentials(
                access_key_id=config["aws_access_key_id"],
                secret_access_key=config["aws_secret_access_key"],
            ),
            endpoint=config.get("endpoint", DEFAULT_ENDPOINT),
            addressing_style=config.get("addressing_style", "virtual"),
            secure=config.get("secure", True),
            region_name=config.get("region_name", DEFAULT_REGION),
        )

    return profiles


def load_from_env() -> ClientConfig:
    """Load a client configuration from S3LITE_* environment variables.

    Raises:
        ConfigError: If a required variable is missing.
    """
    values = {}
    for suffix in ("BUCKET", "ACCESS_KEY", "SECRET_KEY"):
        var = ENV_PREFIX + suffix
        value = os.environ.get(var)
        if not value:
            raise ConfigError(f"Missing environment variable: {var}")
        values[suffix] = value

    insecure = os.environ.get(ENV_PREFIX + "INSECURE", "").lower() in _TRUE_VALUES

    return ClientConfig(
        bucket_name=values["BUCKET"],
        credentials=Credentials(
            access_key_id=values["ACCESS_KEY"],
            secret_access_key=values["SECRET_KEY"],
        ),
        endpoint=os.environ.get(ENV_PREFIX + "ENDPOINT") or DEFAULT_ENDPOINT,
        addressing_style=os.environ.get(ENV_PREFIX + "ADDRESSING_STYLE") or "virtual",
        secure=not insecure,
        region_name=os.environ.get(ENV_PREFIX + "REGION") or DEFAULT_REGION,
    )


def has_env_config() -> bool:
    """Check if an S3LITE_BUCKET environment variable exists."""
    return bool(os.environ.get(ENV_PREFIX + "BUCKET"))


def load_config(
    config_path: str = DEFAULT_CONFIG_PATH,
    profile: Optional[str] = None,
) -> ClientConfig:
    """Load a client configuration with environment priority.

    Priority order:
    1. Environment variables (if S3LITE_BUCKET is set)
    2. The named profile (default: "default") in the JSON file

    Raises:
        ConfigError: If nothing is configured or the profile is unknown.
    """
    if has_env_config():
        return load_from_env()

    if not Path(config_path).exists():
        raise ConfigError(
            "No configuration found. Set S3LITE_* environment variables "
            f"or create {config_path} with at least one enabled profile."
        )

    profiles = load_from_json(config_path)
    name = profile or DEFAULT_PROFILE
    if name not in profiles:
        raise ConfigError(f"Unknown or disabled profile: {name}")
    return profiles[name]
