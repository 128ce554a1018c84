"""
cdk-demo Entry Point Helpers
Select the target environment and instantiate its stage
"""
import logging
import os
from typing import Any, Mapping, Optional
import aws_cdk as cdk

from .app_stage import ApiStage
from .config.environments import (
    ENVIRONMENT_OVERRIDES_CONTEXT_KEY,
    load_environment_table,
    parse_environment_overrides,
    resolve_environment,
)

logger = logging.getLogger(__name__)

ENVIRONMENT_CONTEXT_KEY = "env"
ENVIRONMENT_VARIABLE = "DEPLOY_ENV"
DEFAULT_ENVIRONMENT = "dev"


def select_environment_name(app: cdk.App, environ: Optional[Mapping[str, str]] = None) -> str:
    """Context ``env`` wins over ``DEPLOY_ENV``, which wins over the dev default"""
    environ = os.environ if environ is None else environ

    selected = app.node.try_get_context(ENVIRONMENT_CONTEXT_KEY)
    if not selected:
        selected = environ.get(ENVIRONMENT_VARIABLE)
    if not selected:
        selected = DEFAULT_ENVIRONMENT

    return str(selected).strip().lower()


def read_environment_overrides(app: cdk.App) -> Optional[Mapping[str, Any]]:
    """Override block from the app context (cdk.json or --context)"""
    return parse_environment_overrides(app.node.try_get_context(ENVIRONMENT_OVERRIDES_CONTEXT_KEY))


def create_stage(app: cdk.App, environ: Optional[Mapping[str, str]] = None) -> ApiStage:
    """
    Resolve the selected environment and create its stage.

    Raises:
        ConfigurationError: If the environment is unknown or its record is
            invalid; nothing is added to the app in that case
    """
    environment_name = select_environment_name(app, environ)
    table = load_environment_table(read_environment_overrides(app))
    config = resolve_environment(environment_name, table)

    logger.info(
        f"Synthesizing environment '{config.name}' "
        f"(account {config.account}, region {config.region})"
    )

    return ApiStage(app, config.name, config=config)
