"""
cdk-demo API Stack
Declares the hello function, the REST API front door, the root route and the URL output
"""
import os
from typing import Optional
from aws_cdk import (
    CfnOutput,
    Stack,
    aws_apigateway as apigw,
    aws_lambda as lambda_,
)
from constructs import Construct

from ..config.environments import EnvironmentConfig
from ..constructs.compute import ComputeConstruct
from ..constructs.http_api import HttpApiConstruct
from ..constructs.monitoring import MonitoringConstruct
from ..constructs.tagging import TaggingFramework


class ApiStack(Stack):
    """One environment's REST API and the function behind it"""

    def __init__(self, scope: Construct, construct_id: str,
                 config: EnvironmentConfig,
                 **kwargs) -> None:
        kwargs.setdefault("stack_name", config.stack_name)
        kwargs.setdefault("description", f"cdk-demo REST API backed by Lambda ({config.name})")
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.environment_name = config.name

        # Tagging first so the aspect covers everything declared below
        self.tagging_framework = TaggingFramework(
            self, "TaggingFramework",
            environment_name=config.name,
            additional_tags=config.tags
        )

        self.compute = ComputeConstruct(self, "Compute", config=config)

        self.http_api = HttpApiConstruct(
            self, "HttpApi",
            config=config,
            handler=self.compute.hello_function
        )

        self.api_url_output = CfnOutput(
            self, "ApiUrl",
            value=self.http_api.url,
            description="Base URL of the REST API"
        )

        self.monitoring: Optional[MonitoringConstruct] = None
        if config.enable_alarms:
            self._setup_monitoring()

    def _setup_monitoring(self) -> None:
        """Set up alarms for the function and the API"""
        self.monitoring = MonitoringConstruct(self, "Monitoring", config=self.config)
        self.monitoring.add_lambda_monitoring("hello", self.compute.hello_function)
        self.monitoring.add_api_monitoring(self.http_api.api)

        alarm_email = os.getenv("ALARM_EMAIL")
        if alarm_email:
            self.monitoring.add_email_subscription(alarm_email)

    @property
    def hello_function(self) -> lambda_.Function:
        return self.compute.hello_function

    @property
    def rest_api(self) -> apigw.RestApi:
        return self.http_api.api
