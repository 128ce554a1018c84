"""
Tagging Framework for cdk-demo
Applies common, environment and resource-type tags through a CDK Aspect
"""
from typing import Dict, Mapping, Optional
import jsii
from aws_cdk import (
    Aspects,
    AspectPriority,
    CfnResource,
    IAspect,
    TagManager,
)
from constructs import Construct, IConstruct

from ..config.environments import PROJECT_NAME


@jsii.implements(IAspect)
class EnvironmentTaggingAspect:
    """Aspect that writes all tags onto taggable CloudFormation resources in one pass"""

    def __init__(self, environment_name: str, additional_tags: Optional[Mapping[str, str]] = None):
        self.environment_name = environment_name

        self.required_tags = {
            "App": PROJECT_NAME,
            "Environment": environment_name,
            "ManagedBy": "cdk",
        }

        # Tags keyed by CloudFormation resource type
        self.resource_type_tags = {
            "AWS::Lambda::Function": {
                "Component": "compute"
            },
            "AWS::ApiGateway::RestApi": {
                "Component": "front-door"
            },
            "AWS::ApiGateway::Stage": {
                "Component": "front-door"
            },
            "AWS::Logs::LogGroup": {
                "DataClassification": "internal"
            },
            "AWS::SNS::Topic": {
                "NotificationLevel": "operational"
            }
        }

        if additional_tags:
            self.required_tags.update(additional_tags)

    def tags_for(self, resource_type: str) -> Dict[str, str]:
        """Resolve the full tag set for a resource type"""
        tags = dict(self.required_tags)
        tags.update(self.resource_type_tags.get(resource_type, {}))
        return tags

    def visit(self, node: IConstruct) -> None:
        # Only CloudFormation resources; Tags.of().add() would register more aspects
        if not isinstance(node, CfnResource) or not TagManager.is_taggable(node):
            return

        tag_manager = getattr(node, "tags", None)
        if tag_manager is None:
            return

        for tag_key, tag_value in self.tags_for(node.cfn_resource_type).items():
            tag_manager.set_tag(tag_key, tag_value)


class TaggingFramework(Construct):
    """Attaches the environment tagging aspect to its scope"""

    def __init__(self, scope: Construct, construct_id: str,
                 environment_name: str,
                 additional_tags: Optional[Mapping[str, str]] = None,
                 **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.environment_name = environment_name
        self.aspect = EnvironmentTaggingAspect(environment_name, additional_tags)

        # MUTATING priority matches Tags.of().add() and avoids priority conflicts
        Aspects.of(scope).add(self.aspect, priority=AspectPriority.MUTATING)
