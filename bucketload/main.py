"""bucketload CLI application entry point.

This module provides the main Click CLI interface for bucketload, which copies
objects from a cloud storage bucket into warehouse tables. It handles
configuration loading, validation, logging setup, and command orchestration.

The CLI supports command chaining, allowing multiple operations to be executed in
sequence (e.g., `bucketload check-connections plan transfer`).
"""
import importlib.metadata
from pathlib import Path
from typing import Optional

import click
from dotenv import find_dotenv, load_dotenv
from pydantic import ValidationError

from bucketload.commands.check_connections import check_connections
from bucketload.commands.files_in_storage import files_in_storage
from bucketload.commands.files_in_warehouse import files_in_warehouse
from bucketload.commands.plan import plan
from bucketload.commands.transfer import transfer
from bucketload.logging_config import setup_logging
from bucketload.objects.app_config import AppConfig
from bucketload.objects.transfer_config import TransferConfig


@click.group(chain=True)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging (DEBUG level)",
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Write logs to file",
)
@click.option(
    "--transfer-config",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
    help="Location of transfer_config.toml",
    envvar="BL_TRANSFER_CONFIG",
)
@click.option(
    "--storage-backend",
    type=click.Choice(["gcs", "s3"]),
    default="s3",
    show_default=True,
    help="Object store holding the bucket",
    envvar="BL_STORAGE_BACKEND",
)
@click.option(
    "--bucket",
    type=str,
    help="Bucket to copy objects from",
    envvar="BL_BUCKET",
)
@click.option(
    "--prefix",
    type=str,
    default="",
    help="Only transfer objects whose key starts with this prefix",
    envvar="BL_PREFIX",
)
@click.option(
    "--gcs-project-id",
    type=str,
    help="Project ID for Google Cloud Storage",
    envvar="BL_GCS_PROJECT_ID",
)
@click.option(
    "--s3-endpoint-url",
    type=str,
    help="Endpoint of an S3-compatible store",
    envvar="BL_S3_ENDPOINT_URL",
)
@click.option(
    "--s3-region",
    type=str,
    help="AWS region of the bucket",
    envvar="BL_S3_REGION",
)
@click.option(
    "--s3-force-path-style",
    is_flag=True,
    help="Use path-style addressing for S3-compatible stores",
    envvar="BL_S3_FORCE_PATH_STYLE",
)
@click.option(
    "--warehouse-url",
    type=str,
    help="SQLAlchemy URL of the warehouse database",
    envvar="BL_WAREHOUSE_URL",
)
@click.option(
    "--warehouse-schema",
    type=str,
    help="Schema holding the destination tables",
    envvar="BL_WAREHOUSE_SCHEMA",
)
@click.option(
    "--max-workers",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of objects transferred concurrently",
    envvar="BL_MAX_WORKERS",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_file: Optional[str],
    transfer_config: Optional[str],
    storage_backend: str,
    bucket: Optional[str],
    prefix: str,
    gcs_project_id: Optional[str],
    s3_endpoint_url: Optional[str],
    s3_region: Optional[str],
    s3_force_path_style: bool,
    warehouse_url: Optional[str],
    warehouse_schema: Optional[str],
    max_workers: int,
) -> None:
    """bucketload CLI group for copying bucket objects into warehouse tables.

    This is the main CLI entry point that handles configuration loading, validation,
    and context setup for all commands. Supports command chaining for sequential
    operations.

    Raises:
        click.UsageError: If required parameters are missing or invalid

    Example:
        >>> bucketload --bucket landing plan transfer --yes
    """
    logger = setup_logging(verbose=verbose, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["logger"] = logger

    if not transfer_config:
        raise click.UsageError("BL_TRANSFER_CONFIG must be set")
    if not bucket:
        raise click.UsageError("BL_BUCKET must be set")
    if not warehouse_url:
        raise click.UsageError("BL_WAREHOUSE_URL must be set")

    logger.info(f"transfer_config: {transfer_config}")

    try:
        valid_config = TransferConfig.load(transfer_config)
    except ValueError as e:
        raise click.UsageError(str(e))

    ctx.obj["TRANSFER_CONFIG"] = valid_config

    try:
        app_config = AppConfig(
            transfer_config=Path(transfer_config),
            storage_backend=storage_backend,  # type: ignore[arg-type]
            bucket=bucket,
            prefix=prefix,
            gcs_project_id=gcs_project_id,
            s3_endpoint_url=s3_endpoint_url,
            s3_region=s3_region,
            s3_force_path_style=s3_force_path_style,
            warehouse_url=warehouse_url,
            warehouse_schema=warehouse_schema,
            max_workers=max_workers,
        )
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration\n{e}")

    ctx.obj["CONFIG"] = app_config


cli.add_command(check_connections)
cli.add_command(files_in_storage)
cli.add_command(plan)
cli.add_command(transfer)
cli.add_command(files_in_warehouse)


def start_cli() -> click.Group:
    """Initialize and start the bucketload CLI application.

    Loads environment variables from a .env file when one is found, displays
    the application banner with version information, and runs the Click group.
    """
    env_file = find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file, verbose=True)

    click.secho("bucketload", fg="magenta", bold=True)
    click.echo(f"Version: {importlib.metadata.version('bucketload')}")
    if env_file:
        click.secho(f"Configuration loaded from: {env_file}")
    click.echo(nl=True)

    return cli(obj={})  # type: ignore


if __name__ == "__main__":
    start_cli()
