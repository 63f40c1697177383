import click

from bucketload.commands.providers import get_transfer_job
from bucketload.console import error, file_list, newline, table, warning
from bucketload.exceptions import ConnectivityError
from bucketload.objects.transfer_job import PlannedRun


@click.command(name="plan")
@click.pass_context
def plan(ctx: click.Context) -> PlannedRun:
    """Show what a transfer would copy, without copying anything."""

    job = get_transfer_job(ctx)

    try:
        planned = job.build_plan()
    except ConnectivityError as e:
        error(str(e))
        ctx.abort()

    summary_df = planned.summary_df()

    newline()
    if len(summary_df) == 0:
        warning("No objects found in bucket.")
        return planned

    table(
        data=summary_df.values.tolist(),
        headers=list(summary_df.columns),
        title="Transfer Plan",
    )

    for table_name, planning_error in planned.planning_errors.items():
        error(f"{table_name}: {planning_error}")

    new_keys = [obj.key for plan in planned.plans.values() for obj in plan.objects]

    newline()
    if len(new_keys) == 0:
        warning("No new objects found.")
    else:
        file_list(
            files=new_keys,
            max_display=10,
            title=f"Found {len(new_keys)} new objects:",
            count_total=len(new_keys),
        )

    return planned
