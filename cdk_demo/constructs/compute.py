"""
Compute Construct for cdk-demo
Declares the hello Lambda function and its log group
"""
from pathlib import Path
from typing import Dict
from aws_cdk import (
    Duration,
    RemovalPolicy,
    aws_lambda as lambda_,
    aws_logs as logs,
)
from constructs import Construct

from ..config.environments import EnvironmentConfig

HANDLERS_DIR = Path(__file__).resolve().parent.parent / "handlers"

# Byte-code caches would change the asset hash between otherwise identical syntheses
ASSET_EXCLUDES = ["__pycache__", "*.pyc"]

RETENTION_DAYS = {
    1: logs.RetentionDays.ONE_DAY,
    3: logs.RetentionDays.THREE_DAYS,
    5: logs.RetentionDays.FIVE_DAYS,
    7: logs.RetentionDays.ONE_WEEK,
    14: logs.RetentionDays.TWO_WEEKS,
    30: logs.RetentionDays.ONE_MONTH,
    60: logs.RetentionDays.TWO_MONTHS,
    90: logs.RetentionDays.THREE_MONTHS,
    120: logs.RetentionDays.FOUR_MONTHS,
    150: logs.RetentionDays.FIVE_MONTHS,
    180: logs.RetentionDays.SIX_MONTHS,
    365: logs.RetentionDays.ONE_YEAR,
    400: logs.RetentionDays.THIRTEEN_MONTHS,
    545: logs.RetentionDays.EIGHTEEN_MONTHS,
    731: logs.RetentionDays.TWO_YEARS,
    1827: logs.RetentionDays.FIVE_YEARS,
    3653: logs.RetentionDays.TEN_YEARS,
}


class ComputeConstruct(Construct):
    """Lambda function serving the REST API root"""

    def __init__(self, scope: Construct, construct_id: str,
                 config: EnvironmentConfig, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.function_name = f"{config.resource_prefix}-hello"
        self.functions: Dict[str, lambda_.Function] = {}

        self.log_group = self._create_log_group()
        self._create_hello_function()

    def _create_log_group(self) -> logs.LogGroup:
        """Create the function log group explicitly so retention and deletion are ours"""
        return logs.LogGroup(
            self, "HelloFunctionLogGroup",
            log_group_name=f"/aws/lambda/{self.function_name}",
            retention=RETENTION_DAYS[self.config.log_retention_days],
            removal_policy=RemovalPolicy.DESTROY
        )

    def _create_hello_function(self) -> None:
        function_props = {
            "function_name": self.function_name,
            "description": f"Greeting handler for the {self.config.name} REST API",
            "runtime": lambda_.Runtime.PYTHON_3_12,
            "handler": "index.lambda_handler",
            "code": lambda_.Code.from_asset(
                str(HANDLERS_DIR / "hello_world"),
                exclude=ASSET_EXCLUDES
            ),
            "memory_size": self.config.lambda_memory_mb,
            "timeout": Duration.seconds(self.config.lambda_timeout_seconds),
            "log_group": self.log_group,
            "environment": {
                "ENVIRONMENT": self.config.name,
                "LOG_LEVEL": "INFO" if self.config.is_production else "DEBUG",
            },
        }

        if self.config.enable_tracing:
            function_props["tracing"] = lambda_.Tracing.ACTIVE

        self.functions["hello"] = lambda_.Function(self, "HelloFunction", **function_props)

    @property
    def hello_function(self) -> lambda_.Function:
        return self.functions["hello"]
