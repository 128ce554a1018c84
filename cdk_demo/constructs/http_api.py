"""
HTTP API Construct for cdk-demo
Declares the REST API front door and binds GET / to the hello function
"""
from aws_cdk import (
    aws_apigateway as apigw,
    aws_lambda as lambda_,
)
from constructs import Construct

from ..config.environments import EnvironmentConfig


class HttpApiConstruct(Construct):
    """REST API with permissive CORS and a single root route"""

    def __init__(self, scope: Construct, construct_id: str,
                 config: EnvironmentConfig,
                 handler: lambda_.IFunction,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config

        self.api = apigw.RestApi(
            self, "ServiceApi",
            rest_api_name=f"{config.resource_prefix}-api",
            description=f"cdk-demo REST API ({config.name})",
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=apigw.Cors.ALL_ORIGINS,
                allow_methods=apigw.Cors.ALL_METHODS
            ),
            deploy_options=self._get_stage_options(),
            cloud_watch_role=False
        )

        self.integration = apigw.LambdaIntegration(handler)
        self.root_method = self.api.root.add_method("GET", self.integration)

    def _get_stage_options(self) -> apigw.StageOptions:
        """Stage named after the environment, throttled per environment"""
        return apigw.StageOptions(
            stage_name=self.config.name,
            throttling_rate_limit=self.config.api_throttle_rate_limit,
            throttling_burst_limit=self.config.api_throttle_burst_limit,
            tracing_enabled=self.config.enable_tracing,
            metrics_enabled=self.config.enable_alarms
        )

    @property
    def url(self) -> str:
        """Base URL of the deployed stage"""
        return self.api.url
