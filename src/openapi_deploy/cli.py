"""CLI entry point for openapi-deploy."""

import logging
from pathlib import Path

import click
from botocore.exceptions import BotoCoreError

from openapi_deploy.config import GatewayCredentials, load_config
from openapi_deploy.errors import DeployError
from openapi_deploy.gateway.client import ApiGatewayClient
from openapi_deploy.gateway.importer import GatewayImporter
from openapi_deploy.pipeline import DeployPipeline, remove_artifacts
from openapi_deploy.report import EXIT_HALTED, OutcomeReporter
from openapi_deploy.spec.inspect import format_operations, gateway_extensions, list_operations

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class HaltedError(click.ClickException):
    exit_code = EXIT_HALTED


def _spec_argument():
    return click.argument(
        "spec_path", required=False, default=None, type=click.Path(path_type=Path)
    )


def _local_pipeline(spec_path: Path | None, write_artifacts: bool = True, json_path: Path | None = None) -> DeployPipeline:
    """Pipeline for the offline commands; it has no gateway importer."""
    try:
        config = load_config(spec_path=spec_path, json_path=json_path, write_artifacts=write_artifacts)
    except DeployError as e:
        raise HaltedError(str(e)) from e
    return DeployPipeline(config, importer=None)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Convert, validate and deploy OpenAPI documents to AWS API Gateway."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@main.command()
@_spec_argument()
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="JSON output path (default: sibling .json).")
def convert(spec_path: Path | None, output: Path | None):
    """Convert the YAML document to JSON and check it is well-formed."""
    pipeline = _local_pipeline(spec_path, json_path=output)
    try:
        artifact = pipeline.convert(pipeline.load())
        pipeline.validate(artifact)
    except DeployError as e:
        raise HaltedError(str(e)) from e
    click.echo(f"Converted {pipeline.config.spec_path} -> {artifact.path}")


@main.command()
@_spec_argument()
@click.option("--show", is_flag=True, help="Print the converted JSON document.")
def validate(spec_path: Path | None, show: bool):
    """Check the document converts to well-formed JSON, without writing files."""
    pipeline = _local_pipeline(spec_path, write_artifacts=False)
    try:
        artifact = pipeline.convert(pipeline.load())
        doc = pipeline.validate(artifact)
    except DeployError as e:
        raise HaltedError(str(e)) from e

    if show:
        click.echo(artifact.text, nl=False)
    operations = list_operations(doc)
    click.echo(f"{pipeline.config.spec_path} is valid ({len(operations)} operations).")


@main.command()
@_spec_argument()
def encode(spec_path: Path | None):
    """Write the JSON and base64 intermediates without deploying."""
    pipeline = _local_pipeline(spec_path)
    try:
        artifact = pipeline.convert(pipeline.load())
        pipeline.validate(artifact)
        payload = pipeline.encode(artifact)
    except DeployError as e:
        raise HaltedError(str(e)) from e
    click.echo(f"Encoded {artifact.path} -> {payload.path}")


@main.command()
@_spec_argument()
def inspect(spec_path: Path | None):
    """Print each route with its API Gateway integration."""
    pipeline = _local_pipeline(spec_path, write_artifacts=False)
    try:
        doc = pipeline.validate(pipeline.convert(pipeline.load()))
    except DeployError as e:
        raise HaltedError(str(e)) from e

    info = doc.get("info") or {}
    click.echo(f"{info.get('title', pipeline.config.spec_path)} {info.get('version', '')}".rstrip())
    click.echo(format_operations(list_operations(doc)))
    for key, value in gateway_extensions(doc).items():
        click.echo(f"{key}: {value}")


@main.command()
@_spec_argument()
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML file with deploy settings.")
@click.option("--region", default=None, envvar="AWS_DEFAULT_REGION", help="AWS region (default: AWS_REGION, then us-east-1).")
@click.option("--timeout", default=None, type=float, help="Gateway call timeout in seconds.")
@click.option("--rest-api-id", default=None, help="Update this REST API instead of importing a new one.")
@click.option("--mode", default=None, type=click.Choice(["overwrite", "merge"]), help="Update mode with --rest-api-id.")
@click.option("--fail-on-warnings/--no-fail-on-warnings", default=None, help="Reject the import on gateway warnings.")
@click.option("--endpoint-type", default=None, type=click.Choice(["REGIONAL", "EDGE", "PRIVATE"]), help="Endpoint configuration type.")
@click.option("--cleanup", is_flag=True, help="Remove intermediate artifacts after the import.")
@click.option("--post-steps-on-rejection/--no-post-steps-on-rejection", default=None, help="Run post steps after a rejected import.")
def deploy(
    spec_path: Path | None,
    config_path: Path | None,
    region: str | None,
    timeout: float | None,
    rest_api_id: str | None,
    mode: str | None,
    fail_on_warnings: bool | None,
    endpoint_type: str | None,
    cleanup: bool,
    post_steps_on_rejection: bool | None,
):
    """Full pipeline: convert -> validate -> encode -> import -> report."""
    reporter = OutcomeReporter()
    credentials = GatewayCredentials.from_env()
    try:
        config = load_config(
            config_path,
            defaults={"region": credentials.region},
            spec_path=spec_path,
            region=region,
            timeout=timeout,
            rest_api_id=rest_api_id,
            mode=mode,
            fail_on_warnings=fail_on_warnings,
            endpoint_type=endpoint_type,
            run_post_steps_on_rejection=post_steps_on_rejection,
        )
    except DeployError as e:
        raise HaltedError(str(e)) from e

    try:
        client = ApiGatewayClient(
            region=config.region,
            timeout=config.timeout,
            credentials=credentials,
        )
    except BotoCoreError as e:
        raise HaltedError(f"Cannot create API Gateway client: {e}") from e
    post_steps = [remove_artifacts(config)] if cleanup else []
    pipeline = DeployPipeline(config, GatewayImporter.from_config(client, config), post_steps=post_steps)

    click.echo(f"Deploying {config.spec_path} to API Gateway ({config.region})...")
    raise SystemExit(reporter.report(pipeline.run()))
