"""
Environment Promotion Workflow
Builds and runs CDK CLI invocations per environment and promotes dev -> uat -> stage -> prod
"""
import enum
import logging
import os
import subprocess
from typing import Any, Callable, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config.environments import ENVIRONMENTS, EnvironmentConfig, resolve_environment
from .entrypoint import ENVIRONMENT_CONTEXT_KEY
from .errors import ConfigurationError, DeploymentError

logger = logging.getLogger(__name__)

PROMOTION_ORDER = ("dev", "uat", "stage", "prod")

CDK_BINARY_VARIABLE = "CDK_BINARY"
DEFAULT_CDK_BINARY = "cdk"


class CdkAction(str, enum.Enum):
    SYNTH = "synth"
    DIFF = "diff"
    DEPLOY = "deploy"
    DESTROY = "destroy"


def next_environment(environment_name: str) -> Optional[str]:
    """Environment that follows ``environment_name``, or None after prod"""
    if environment_name not in PROMOTION_ORDER:
        raise ConfigurationError(
            f"Environment '{environment_name}' is not part of the promotion order "
            f"({' -> '.join(PROMOTION_ORDER)})",
            environment_name=environment_name
        )
    position = PROMOTION_ORDER.index(environment_name)
    if position + 1 == len(PROMOTION_ORDER):
        return None
    return PROMOTION_ORDER[position + 1]


def get_cdk_binary(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """CDK CLI executable, split so values like ``npx cdk`` work"""
    environ = os.environ if environ is None else environ
    return environ.get(CDK_BINARY_VARIABLE, DEFAULT_CDK_BINARY).split() or [DEFAULT_CDK_BINARY]


def build_cdk_command(action: CdkAction, config: EnvironmentConfig,
                      cdk_binary: Optional[List[str]] = None,
                      fail_on_diff: bool = False) -> List[str]:
    """
    Build the CDK CLI argv for one environment.

    Args:
        action: CLI subcommand to run
        config: Target environment
        cdk_binary: Executable and leading arguments, defaults to ``CDK_BINARY``
        fail_on_diff: For ``diff``, exit non-zero when differences are found

    Returns:
        Argument list suitable for subprocess.run
    """
    action = CdkAction(action)
    command = list(cdk_binary or get_cdk_binary())
    command.extend([
        action.value,
        f"{config.name}/*",
        "--context", f"{ENVIRONMENT_CONTEXT_KEY}={config.name}",
    ])

    if action is CdkAction.DEPLOY:
        # Production deploys still stop on IAM/security-group broadening
        command.extend(["--require-approval", "broadening" if config.is_production else "never"])
    elif action is CdkAction.DESTROY:
        command.append("--force")
    elif action is CdkAction.DIFF and fail_on_diff:
        command.append("--fail")

    return command


def verify_caller_account(config: EnvironmentConfig, sts_client: Any = None) -> str:
    """
    Confirm the active (federated) credentials belong to the environment's account.

    Returns:
        The caller account id

    Raises:
        DeploymentError: If the identity cannot be resolved or the account differs
    """
    try:
        sts_client = sts_client or boto3.client("sts", region_name=config.region)
        account = sts_client.get_caller_identity()["Account"]
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "")
        raise DeploymentError(f"Failed to resolve caller identity: {error_code}") from e
    except BotoCoreError as e:
        raise DeploymentError(f"Failed to resolve caller identity: {e}") from e

    if account != config.account:
        raise DeploymentError(
            f"Credentials belong to account {account}, but environment "
            f"'{config.name}' deploys to {config.account}"
        )

    logger.info(f"Caller identity verified for '{config.name}' (account {account})")
    return account


def run_cdk(command: List[str], cwd: Optional[str] = None,
            runner: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> subprocess.CompletedProcess:
    """Run a CDK CLI command, raising DeploymentError on a non-zero exit"""
    logger.info(f"Running: {' '.join(command)}")
    try:
        result = runner(command, cwd=cwd, check=False)
    except OSError as e:
        raise DeploymentError(f"Could not start '{command[0]}': {e}", command=command) from e

    if result.returncode != 0:
        raise DeploymentError(
            f"'{' '.join(command)}' exited with status {result.returncode}",
            command=command,
            returncode=result.returncode
        )
    return result


def run_action(action: CdkAction, config: EnvironmentConfig,
               verify_account: bool = True,
               cwd: Optional[str] = None,
               sts_client: Any = None,
               runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
               cdk_binary: Optional[List[str]] = None,
               fail_on_diff: bool = False) -> subprocess.CompletedProcess:
    """Run one CDK action against an environment, checking credentials for side-effecting actions"""
    action = CdkAction(action)
    if verify_account and action in (CdkAction.DEPLOY, CdkAction.DESTROY):
        verify_caller_account(config, sts_client=sts_client)

    command = build_cdk_command(action, config, cdk_binary=cdk_binary, fail_on_diff=fail_on_diff)
    return run_cdk(command, cwd=cwd, runner=runner)


def promote(source_environment: str,
            table: Mapping[str, EnvironmentConfig] = ENVIRONMENTS,
            verify_account: bool = True,
            cwd: Optional[str] = None,
            sts_client: Any = None,
            runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
            cdk_binary: Optional[List[str]] = None) -> EnvironmentConfig:
    """
    Deploy the environment that follows ``source_environment``.

    Shows the diff against the target first, then deploys it.

    Returns:
        The configuration of the environment that was deployed

    Raises:
        ConfigurationError: If the source is unknown or already the last environment
        DeploymentError: If the identity check or a CDK command fails
    """
    target_name = next_environment(source_environment)
    if target_name is None:
        raise ConfigurationError(
            f"Environment '{source_environment}' is the last in the promotion order",
            environment_name=source_environment
        )

    target = resolve_environment(target_name, table)
    logger.info(f"Promoting '{source_environment}' -> '{target.name}'")

    if verify_account:
        verify_caller_account(target, sts_client=sts_client)

    run_action(CdkAction.DIFF, target, verify_account=False, cwd=cwd,
               runner=runner, cdk_binary=cdk_binary)
    run_action(CdkAction.DEPLOY, target, verify_account=False, cwd=cwd,
               runner=runner, cdk_binary=cdk_binary)

    logger.info(f"Promotion to '{target.name}' complete")
    return target
