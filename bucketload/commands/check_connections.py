import click

from bucketload.commands.providers import get_storage_provider, get_warehouse
from bucketload.console import error, success
from bucketload.exceptions import ConnectivityError


@click.command(name="check-connections")
@click.pass_context
def check_connections(ctx: click.Context) -> bool:
    """Verify access to the bucket and the warehouse."""

    store = get_storage_provider(ctx)
    success(f"Bucket {store.bucket_name} is accessible")

    warehouse = get_warehouse(ctx)
    try:
        with warehouse:
            is_connected = warehouse.test_connection()
    except ConnectivityError as e:
        error(str(e))
        ctx.abort()

    if not is_connected:
        error("Warehouse connection test failed")
        ctx.abort()

    success("Warehouse connection successful")
    return True
