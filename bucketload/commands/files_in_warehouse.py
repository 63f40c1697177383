import click

from bucketload.commands.providers import get_warehouse
from bucketload.console import error, info, newline, table
from bucketload.exceptions import ConnectivityError
from bucketload.objects.file_utils import human_readable_size
from bucketload.objects.transfer_config import TransferConfig


@click.command(name="files-in-warehouse")
@click.pass_context
def files_in_warehouse(ctx: click.Context) -> None:
    """Display transferred object counts for every configured table."""

    transfer_config: TransferConfig = ctx.obj["TRANSFER_CONFIG"]
    warehouse = get_warehouse(ctx)

    rows = []
    try:
        with warehouse:
            for table_name in transfer_config.table_names:
                if not warehouse.table_exists(table_name):
                    rows.append([table_name, 0, human_readable_size(0)])
                    continue
                files_df = warehouse.files_in_table_df(table_name)
                rows.append(
                    [
                        table_name,
                        len(files_df),
                        human_readable_size(int(files_df["file_size"].sum())),
                    ]
                )
    except ConnectivityError as e:
        error(str(e))
        ctx.abort()

    newline()
    info(f"{sum(row[1] for row in rows)} objects in warehouse", bold=True)
    table(data=rows, headers=["Table", "Object Count", "Total Size"], title="Transferred Objects")
