"""
cdk-demo Application Stage
Groups the stacks of one environment and binds them to its account and region
"""
from typing import Dict
import aws_cdk as cdk
from constructs import Construct

from .config.environments import EnvironmentConfig
from .stacks.api_stack import ApiStack


class ApiStage(cdk.Stage):
    """Deployable grouping for one environment"""

    def __init__(self, scope: Construct, construct_id: str,
                 config: EnvironmentConfig, **kwargs) -> None:
        kwargs.setdefault("env", cdk.Environment(account=config.account, region=config.region))
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.environment_name = config.name
        self.stacks: Dict[str, cdk.Stack] = {}

        self.stacks["api"] = ApiStack(self, "ApiStack", config=config)

    @property
    def api_stack(self) -> ApiStack:
        return self.stacks["api"]
