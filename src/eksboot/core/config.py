"""Configuration management for eksboot.

Configuration comes from the process environment (the only input a Lambda invocation
gets), optionally overridden by CLI options. Everything is validated before any
network call is made.
"""

import os
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from eksboot.core.exceptions import ConfigurationError

ENV_CLUSTER_NAME = "CLUSTER_NAME"
ENV_ROLE_ARN = "ROLE_ARN"
ENV_REGION = "CLUSTER_REGION"

# Region variables provided by the platform, in lookup order
PLATFORM_REGION_VARS = ("AWS_REGION", "AWS_DEFAULT_REGION")

_OPTIONAL_ENV = {
    "list_namespace": "POD_LIST_NAMESPACE",
    "pod_namespace": "POD_NAMESPACE",
    "pod_name": "POD_NAME",
    "timeout_seconds": "REQUEST_TIMEOUT_SECONDS",
}

ROLE_ARN_PATTERN = re.compile(r"^arn:aws[a-z-]*:iam::\d{12}:role/[\w+=,.@/-]{1,512}$")


def resolve_region(explicit: str | None, environ: Mapping[str, str] | None = None) -> str:
    """Resolve the AWS region for the target cluster.

    Order: explicit value, then CLUSTER_REGION, then AWS_REGION, then AWS_DEFAULT_REGION.

    Args:
        explicit: Region given by an override or a CLI option (optional)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Region identifier

    Raises:
        ConfigurationError: If no source provides a region
    """
    env = os.environ if environ is None else environ

    if explicit:
        return explicit

    for var in (ENV_REGION, *PLATFORM_REGION_VARS):
        value = env.get(var, "").strip()
        if value:
            return value

    raise ConfigurationError(
        f"No region configured: set {ENV_REGION} or one of {', '.join(PLATFORM_REGION_VARS)}"
    )


def is_role_arn(value: str) -> bool:
    """Check whether a string looks like an IAM role ARN."""
    return bool(ROLE_ARN_PATTERN.match(value))


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stdout"


class BootstrapConfig(BaseModel):
    """Settings for one bootstrap invocation."""

    cluster_name: str = Field(..., min_length=1, description="EKS cluster name")
    role_arn: str = Field("", description="Role the token asserts; empty means own identity")
    region: str = Field(..., min_length=1, description="AWS region of the cluster")
    list_namespace: str = Field("", description="Namespace to count pods in; empty for all")
    pod_namespace: str = "default"
    pod_name: str = "example-xxxxx"
    timeout_seconds: float = Field(10.0, gt=0, le=60)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("role_arn")
    @classmethod
    def _check_role_arn(cls, value: str) -> str:
        value = value.strip()
        if value and not is_role_arn(value):
            raise ValueError(f"not an IAM role ARN: {value!r}")
        return value

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: Any
    ) -> "BootstrapConfig":
        """Load configuration from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)
            **overrides: Field values that take precedence over the environment;
                None values are ignored

        Returns:
            BootstrapConfig instance

        Raises:
            ConfigurationError: If a required value is missing or a value is invalid
        """
        env = os.environ if environ is None else environ
        values = {key: value for key, value in overrides.items() if value is not None}

        cluster_name = values.get("cluster_name", env.get(ENV_CLUSTER_NAME, "")).strip()
        if not cluster_name:
            raise ConfigurationError(f"Required setting {ENV_CLUSTER_NAME} is not set")
        values["cluster_name"] = cluster_name

        # Presence is required; an empty value explicitly selects the caller's identity
        if "role_arn" not in values:
            if ENV_ROLE_ARN not in env:
                raise ConfigurationError(f"Required setting {ENV_ROLE_ARN} is not set")
            values["role_arn"] = env[ENV_ROLE_ARN]

        values["region"] = resolve_region(values.get("region"), env)

        for field, var in _OPTIONAL_ENV.items():
            if field not in values and var in env:
                values[field] = env[var]

        if "logging" not in values:
            values["logging"] = LoggingConfig(
                level=env.get("LOG_LEVEL", "INFO"),
                format=env.get("LOG_FORMAT", "json"),
            )

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
