"""
Environment Configuration for cdk-demo
Static per-environment records, context overrides and environment resolution
"""
import dataclasses
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_NAME = "cdk-demo"

# CDK context key holding per-environment field overrides
ENVIRONMENT_OVERRIDES_CONTEXT_KEY = "cdk-demo:environments"

# Retention values accepted by CloudWatch Logs
SUPPORTED_LOG_RETENTION_DAYS = (
    1, 3, 5, 7, 14, 30, 60, 90, 120, 150, 180, 365, 400, 545, 731, 1827, 3653
)

_ACCOUNT_PATTERN = re.compile(r"^\d{12}$")
_REGION_PATTERN = re.compile(r"^[a-z]{2}(-gov)?-[a-z]+-\d$")
_ENVIRONMENT_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Deployment target and sizing for one environment.

    Attributes:
        name: Environment key (dev, uat, stage, prod)
        account: 12-digit AWS account id
        region: AWS region the stage is bound to
        lambda_memory_mb: Memory allocated to the hello function
        lambda_timeout_seconds: Timeout of the hello function
        log_retention_days: Retention of the function log group
        api_throttle_rate_limit: Steady-state request rate of the API stage
        api_throttle_burst_limit: Burst limit of the API stage
        enable_tracing: Turn on X-Ray for the function and the API stage
        enable_alarms: Create CloudWatch alarms and the alarm topic
        tags: Environment-scoped resource tags
    """
    name: str
    account: str
    region: str
    lambda_memory_mb: int = 256
    lambda_timeout_seconds: int = 10
    log_retention_days: int = 7
    api_throttle_rate_limit: float = 100.0
    api_throttle_burst_limit: int = 50
    enable_tracing: bool = False
    enable_alarms: bool = False
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        self._validate()
        # Freeze the tag mapping so the record stays immutable end to end
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    def _fail(self, message: str) -> None:
        raise ConfigurationError(
            f"Invalid configuration for environment '{self.name}': {message}",
            environment_name=self.name
        )

    def _validate(self) -> None:
        if not isinstance(self.name, str) or not _ENVIRONMENT_NAME_PATTERN.match(self.name):
            raise ConfigurationError(f"Invalid environment name: {self.name!r}",
                                     environment_name=str(self.name))

        if not isinstance(self.account, str) or not _ACCOUNT_PATTERN.match(self.account):
            self._fail(f"account must be a 12-digit string, got {self.account!r}")

        if not isinstance(self.region, str) or not _REGION_PATTERN.match(self.region):
            self._fail(f"region is not a valid AWS region: {self.region!r}")

        self._check_int("lambda_memory_mb", 128, 10240)
        self._check_int("lambda_timeout_seconds", 1, 900)
        self._check_int("api_throttle_burst_limit", 1, 5000)

        if self.log_retention_days not in SUPPORTED_LOG_RETENTION_DAYS or isinstance(self.log_retention_days, bool):
            self._fail(
                f"log_retention_days must be one of {SUPPORTED_LOG_RETENTION_DAYS}, "
                f"got {self.log_retention_days!r}"
            )

        rate = self.api_throttle_rate_limit
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
            self._fail(f"api_throttle_rate_limit must be a positive number, got {rate!r}")

        for flag in ("enable_tracing", "enable_alarms"):
            if not isinstance(getattr(self, flag), bool):
                self._fail(f"{flag} must be a boolean, got {getattr(self, flag)!r}")

        if not isinstance(self.tags, Mapping):
            self._fail(f"tags must be a mapping, got {type(self.tags).__name__}")
        for key, value in self.tags.items():
            if not isinstance(key, str) or not isinstance(value, str):
                self._fail(f"tags entry {key!r} must map a string to a string")

    def _check_int(self, field_name: str, minimum: int, maximum: int) -> None:
        value = getattr(self, field_name)
        if isinstance(value, bool) or not isinstance(value, int) or not minimum <= value <= maximum:
            self._fail(f"{field_name} must be an integer between {minimum} and {maximum}, got {value!r}")

    @property
    def is_production(self) -> bool:
        return self.name == "prod"

    @property
    def resource_prefix(self) -> str:
        """Prefix for physical resource names, e.g. cdk-demo-dev"""
        return f"{PROJECT_NAME}-{self.name}"

    @property
    def stack_name(self) -> str:
        return f"{PROJECT_NAME}-api-{self.name}"

    def with_overrides(self, overrides: Mapping[str, Any]) -> "EnvironmentConfig":
        """Return a copy with the given fields replaced, validated like any other record"""
        if not isinstance(overrides, Mapping):
            self._fail(f"overrides must be a mapping, got {type(overrides).__name__}")

        known_fields = {f.name for f in dataclasses.fields(self)} - {"name"}
        unknown = sorted(set(overrides) - known_fields)
        if unknown:
            self._fail(f"unknown configuration field(s): {', '.join(unknown)}")

        return dataclasses.replace(self, **dict(overrides))

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        data["tags"] = dict(self.tags)
        return data


_STATIC_ENVIRONMENTS = (
    EnvironmentConfig(
        name="dev",
        account="111111111111",
        region="us-east-1",
        log_retention_days=7,
        api_throttle_rate_limit=20.0,
        api_throttle_burst_limit=10,
        tags={"CostCenter": "engineering-dev"},
    ),
    EnvironmentConfig(
        name="uat",
        account="222222222222",
        region="us-east-1",
        log_retention_days=14,
        api_throttle_rate_limit=50.0,
        api_throttle_burst_limit=25,
        enable_tracing=True,
        tags={"CostCenter": "engineering-qa"},
    ),
    EnvironmentConfig(
        name="stage",
        account="333333333333",
        region="us-west-2",
        log_retention_days=30,
        enable_tracing=True,
        enable_alarms=True,
        tags={"CostCenter": "engineering-ops"},
    ),
    EnvironmentConfig(
        name="prod",
        account="444444444444",
        region="us-west-2",
        lambda_timeout_seconds=15,
        log_retention_days=90,
        api_throttle_rate_limit=500.0,
        api_throttle_burst_limit=250,
        enable_tracing=True,
        enable_alarms=True,
        tags={"CostCenter": "engineering-ops", "Criticality": "high"},
    ),
)

ENVIRONMENTS: Mapping[str, EnvironmentConfig] = MappingProxyType(
    {config.name: config for config in _STATIC_ENVIRONMENTS}
)


def load_environment_table(overrides: Optional[Mapping[str, Any]] = None) -> Mapping[str, EnvironmentConfig]:
    """
    Build the environment table from the static declarations.

    Args:
        overrides: Optional {environment: {field: value}} mapping, usually the
            value of the ``cdk-demo:environments`` context key

    Returns:
        Read-only mapping of environment name to EnvironmentConfig

    Raises:
        ConfigurationError: If an override names an unknown environment or
            field, or produces an invalid record
    """
    if not overrides:
        return ENVIRONMENTS

    if not isinstance(overrides, Mapping):
        raise ConfigurationError(
            f"Context key '{ENVIRONMENT_OVERRIDES_CONTEXT_KEY}' must be an object, "
            f"got {type(overrides).__name__}"
        )

    table = dict(ENVIRONMENTS)
    for environment_name, fields in overrides.items():
        if environment_name not in table:
            raise ConfigurationError(
                f"Cannot override unknown environment '{environment_name}'. "
                f"Supported environments: {', '.join(ENVIRONMENTS)}",
                environment_name=environment_name
            )
        table[environment_name] = table[environment_name].with_overrides(fields)
        logger.info(f"Applied configuration overrides to '{environment_name}': {sorted(fields)}")

    return MappingProxyType(table)


def resolve_environment(environment_name: str,
                        table: Mapping[str, EnvironmentConfig] = ENVIRONMENTS) -> EnvironmentConfig:
    """Look up one environment, failing fast when it is not declared"""
    config = table.get(environment_name)
    if config is None:
        raise ConfigurationError(
            f"Unknown environment '{environment_name}'. "
            f"Supported environments: {', '.join(table)}",
            environment_name=environment_name
        )
    return config


def parse_environment_overrides(value: Any) -> Optional[Mapping[str, Any]]:
    """Overrides from cdk.json arrive as objects, from --context as JSON strings"""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Context key '{ENVIRONMENT_OVERRIDES_CONTEXT_KEY}' is not valid JSON: {e}"
            ) from e
    return value


def read_project_overrides(project_dir: Optional[str] = None) -> Optional[Mapping[str, Any]]:
    """Read the override block from ``<project_dir>/cdk.json``, the file the CDK CLI synthesizes with"""
    cdk_json = Path(project_dir or ".") / "cdk.json"
    if not cdk_json.is_file():
        return None

    try:
        settings = json.loads(cdk_json.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read {cdk_json}: {e}") from e

    context = settings.get("context", {}) if isinstance(settings, dict) else {}
    return parse_environment_overrides(context.get(ENVIRONMENT_OVERRIDES_CONTEXT_KEY))


def load_project_environment_table(project_dir: Optional[str] = None) -> Mapping[str, EnvironmentConfig]:
    """Environment table as ``cdk deploy`` in ``project_dir`` would see it"""
    return load_environment_table(read_project_overrides(project_dir))
