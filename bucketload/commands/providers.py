"""Lazily built collaborators shared by chained commands."""

from typing import Optional

import click

from bucketload.bucket.gcs_manager import GcsManager
from bucketload.bucket.s3_manager import S3Manager
from bucketload.bucket.sql_warehouse import SqlWarehouse
from bucketload.bucket.storage_provider import StorageProvider
from bucketload.console import error
from bucketload.objects.app_config import AppConfig
from bucketload.objects.transfer_config import TransferConfig
from bucketload.objects.transfer_job import TransferJob


def get_storage_provider(ctx: click.Context) -> StorageProvider:
    """Return the object store for this invocation, aborting if unreachable."""
    store: Optional[StorageProvider] = ctx.obj.get("STORAGE")
    if store is not None:
        return store

    app_config: AppConfig = ctx.obj["CONFIG"]
    transfer_config: TransferConfig = ctx.obj["TRANSFER_CONFIG"]

    if app_config.storage_backend == "gcs":
        store = GcsManager(
            str(app_config.gcs_project_id),
            app_config.bucket,
            chunk_size=transfer_config.chunk_size,
        )
    else:
        store = S3Manager(
            app_config.bucket,
            endpoint_url=app_config.s3_endpoint_url,
            region_name=app_config.s3_region,
            force_path_style=app_config.s3_force_path_style,
        )

    if store.has_error:
        error(f"Unable to access bucket {app_config.bucket}. Check credentials and try again.")
        ctx.abort()

    ctx.obj["STORAGE"] = store
    return store


def get_warehouse(ctx: click.Context) -> SqlWarehouse:
    """Return the (unopened) warehouse for this invocation."""
    warehouse: Optional[SqlWarehouse] = ctx.obj.get("WAREHOUSE")
    if warehouse is not None:
        return warehouse

    app_config: AppConfig = ctx.obj["CONFIG"]
    transfer_config: TransferConfig = ctx.obj["TRANSFER_CONFIG"]

    warehouse = SqlWarehouse(
        app_config.warehouse_url,
        schema=app_config.warehouse_schema,
        chunk_size=transfer_config.chunk_size,
        pool_size=app_config.max_workers,
    )
    ctx.obj["WAREHOUSE"] = warehouse
    return warehouse


def get_transfer_job(ctx: click.Context) -> TransferJob:
    app_config: AppConfig = ctx.obj["CONFIG"]
    return TransferJob(
        get_storage_provider(ctx),
        get_warehouse(ctx),
        ctx.obj["TRANSFER_CONFIG"],
        prefix=app_config.prefix,
        max_workers=app_config.max_workers,
    )
