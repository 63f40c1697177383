import click

from bucketload.commands.plan import plan
from bucketload.commands.providers import get_transfer_job
from bucketload.console import confirm, error, newline, success, table
from bucketload.exceptions import ConnectivityError
from bucketload.objects.transfer_job import PlannedRun
from bucketload.objects.transfer_models import TransferReport


@click.command(name="transfer")
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Do not ask for confirmation",
)
@click.pass_context
def transfer(ctx: click.Context, yes: bool) -> TransferReport:
    """Copy all new objects from the bucket into the warehouse."""

    planned: PlannedRun = ctx.invoke(plan)

    pending = sum(len(p.objects) for p in planned.plans.values())
    if pending > 0 and not yes:
        newline()
        confirm(f"Transfer {pending} new objects?", default=False, abort=True)
    newline()

    # Planning runs again inside the job so the dedup check and the writes
    # share one warehouse session
    job = get_transfer_job(ctx)
    try:
        report = job.run()
    except ConnectivityError as e:
        error(str(e))
        ctx.abort()

    newline()
    table(
        data=[
            [name, counts.copied, counts.skipped_duplicate, counts.skipped_policy, counts.failed]
            for name, counts in report.tables.items()
        ]
        + [
            [
                "TOTAL",
                report.totals.copied,
                report.totals.skipped_duplicate,
                report.totals.skipped_policy,
                report.totals.failed,
            ]
        ],
        headers=["Table", "Copied", "Skipped Duplicate", "Skipped Policy", "Failed"],
        title="Transfer Summary",
    )

    for name in report.abandoned_tables:
        error(f"Plan abandoned for table {name}")

    if report.has_failures:
        error("Transfer errors, check output")
    else:
        success("Successfully transferred objects into the warehouse")

    return report
