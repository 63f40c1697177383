from typing import Dict, List

import click

from bucketload.commands.providers import get_storage_provider
from bucketload.console import error, info, newline, table, warning
from bucketload.exceptions import ConnectivityError
from bucketload.objects.app_config import AppConfig
from bucketload.objects.file_utils import human_readable_size
from bucketload.objects.object_catalog import ObjectCatalogReader
from bucketload.objects.router import Router
from bucketload.objects.transfer_config import TransferConfig
from bucketload.objects.transfer_models import RoutedObject


@click.command(name="files-in-storage")
@click.pass_context
def files_in_storage(ctx: click.Context) -> Dict[str, List[RoutedObject]]:
    """List objects in the bucket grouped by destination table."""

    app_config: AppConfig = ctx.obj["CONFIG"]
    transfer_config: TransferConfig = ctx.obj["TRANSFER_CONFIG"]
    store = get_storage_provider(ctx)

    try:
        candidates = ObjectCatalogReader(store).read(app_config.prefix)
    except ConnectivityError as e:
        error(str(e))
        ctx.abort()

    routed = Router(transfer_config.patterns, transfer_config.default_table).route(candidates)

    newline()
    info(f"{len(candidates)} objects in bucket storage", bold=True)

    if not routed:
        warning(f"No objects found under '{app_config.prefix}'")
        return routed

    table(
        data=[
            [
                table_name,
                len(objects),
                human_readable_size(sum(obj.size for obj in objects)),
            ]
            for table_name, objects in sorted(routed.items())
        ],
        headers=["Table", "Object Count", "Total Size"],
        title="Objects by Destination Table",
    )
    newline()

    return routed
