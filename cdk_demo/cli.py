"""
cdk-demo CLI
Inspect environment configuration, render templates and drive the CDK CLI per environment
"""
import json
import logging
from typing import Optional

import typer

from .config.environments import EnvironmentConfig, load_project_environment_table, resolve_environment
from .errors import CdkDemoError
from .promotion import CdkAction, promote, run_action
from .synthesis import render_template, synthesize_template

app = typer.Typer(help="Multi-environment deployment helpers for the cdk-demo REST API")


def _fail(error: CdkDemoError) -> None:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


def _resolve(environment: str, cwd: Optional[str] = None) -> EnvironmentConfig:
    # Same table `cdk` sees when it runs app.py next to cdk.json
    try:
        table = load_project_environment_table(cwd)
        return resolve_environment(environment.strip().lower(), table)
    except CdkDemoError as e:
        _fail(e)


def _run(action: CdkAction, environment: str, verify_account: bool,
         cwd: Optional[str], fail_on_diff: bool = False) -> None:
    config = _resolve(environment, cwd)
    try:
        run_action(action, config, verify_account=verify_account, cwd=cwd, fail_on_diff=fail_on_diff)
    except CdkDemoError as e:
        _fail(e)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@app.command("show-config")
def show_config(environment: str = typer.Argument(..., help="Environment name"),
                cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Print the resolved configuration of an environment as JSON"""
    config = _resolve(environment, cwd)
    typer.echo(json.dumps(config.to_dict(), indent=2, sort_keys=True))


@app.command()
def template(environment: str = typer.Argument(..., help="Environment name"),
             cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Synthesize locally and print the CloudFormation template"""
    config = _resolve(environment, cwd)
    typer.echo(render_template(synthesize_template(config)))


@app.command()
def synth(environment: str = typer.Argument(..., help="Environment name"),
          cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Run `cdk synth` for an environment"""
    _run(CdkAction.SYNTH, environment, verify_account=False, cwd=cwd)


@app.command()
def diff(environment: str = typer.Argument(..., help="Environment name"),
         fail: bool = typer.Option(False, "--fail", help="Exit non-zero when differences are found"),
         cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Run `cdk diff` for an environment"""
    _run(CdkAction.DIFF, environment, verify_account=False, cwd=cwd, fail_on_diff=fail)


@app.command()
def deploy(environment: str = typer.Argument(..., help="Environment name"),
           skip_account_check: bool = typer.Option(False, help="Do not compare the caller account"),
           cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Run `cdk deploy` for an environment"""
    _run(CdkAction.DEPLOY, environment, verify_account=not skip_account_check, cwd=cwd)


@app.command()
def destroy(environment: str = typer.Argument(..., help="Environment name"),
            yes: bool = typer.Option(False, "--yes", help="Confirm tearing down the environment"),
            skip_account_check: bool = typer.Option(False, help="Do not compare the caller account"),
            cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Run `cdk destroy` for an environment (irreversible)"""
    if not yes:
        typer.echo("Refusing to destroy without --yes", err=True)
        raise typer.Exit(code=1)
    _run(CdkAction.DESTROY, environment, verify_account=not skip_account_check, cwd=cwd)


@app.command("promote")
def promote_command(source: str = typer.Argument(..., help="Environment to promote from"),
                    skip_account_check: bool = typer.Option(False, help="Do not compare the caller account"),
                    cwd: Optional[str] = typer.Option(None, help="Directory holding cdk.json")) -> None:
    """Diff and deploy the environment that follows SOURCE"""
    try:
        table = load_project_environment_table(cwd)
        target = promote(source.strip().lower(), table=table, verify_account=not skip_account_check, cwd=cwd)
    except CdkDemoError as e:
        _fail(e)
    typer.echo(f"Promoted to {target.name}")


if __name__ == "__main__":
    app()
