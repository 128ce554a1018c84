"""
Template Synthesis
Builds one environment's CloudFormation template as plain data, without touching AWS
"""
import json
from typing import Any, Dict

import aws_cdk as cdk

from .app_stage import ApiStage
from .config.environments import EnvironmentConfig


def synthesize_template(config: EnvironmentConfig) -> Dict[str, Any]:
    """Synthesize the API stack of ``config`` in a fresh app and return its template"""
    app = cdk.App()
    stage = ApiStage(app, config.name, config=config)
    assembly = stage.synth()
    return assembly.get_stack_by_name(stage.api_stack.stack_name).template


def render_template(template: Dict[str, Any]) -> str:
    """Canonical JSON rendering; equal templates render to identical text"""
    return json.dumps(template, indent=1, sort_keys=True)
