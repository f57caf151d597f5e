"""
CLI for inspecting ProwJob records.

Provides commands to show, validate and list serialized job records, and to
print the refs summary the checkout step works from.
"""

import json
import logging
import sys

import click

from prow_common.codec import encode_job, loads_list
from prow_common.errors import DecodeError
from prow_common.models import ProwJob

from .config import LOG_LEVELS, configure_logging, get_log_level

logger = logging.getLogger(__name__)


def read_jobs(path: str) -> list[ProwJob]:
    """
    Read and decode every job record in a file ("-" for stdin).

    Raises:
        click.ClickException: If the file cannot be read
        DecodeError: If the contents are not valid job records
    """
    try:
        with click.open_file(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e.strerror or e}")

    logger.debug(f"Read {len(data)} bytes from {path}")
    return loads_list(data)


def load_or_exit(path: str) -> list[ProwJob]:
    """Read job records, printing the error and exiting 1 on failure."""
    try:
        return read_jobs(path)
    except DecodeError as e:
        click.echo(f"Error: {path}: {e}", err=True)
        sys.exit(1)


def format_enum(value) -> str:
    return value.value if value is not None else "-"


def format_refs(job: ProwJob) -> str:
    return str(job.spec.refs) if job.spec.refs is not None else ""


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: PROWJOB_LOG_LEVEL env or WARNING)",
)
def cli(log_level: str | None):
    """prowjob - Inspect and validate ProwJob records."""
    configure_logging(get_log_level(log_level))


@cli.command("show")
@click.argument("path", default="-")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def show(path: str, json_output: bool):
    """Show the job record in PATH (use - for stdin)."""
    jobs = load_or_exit(path)
    if len(jobs) != 1:
        click.echo(
            f"Error: {path} holds {len(jobs)} records; use 'prowjob list'", err=True
        )
        sys.exit(1)
    job = jobs[0]

    if json_output:
        click.echo(json.dumps(encode_job(job), indent=2))
        return

    status = job.status
    click.echo("\nJob Details:")
    click.echo(f"  Job:        {job.spec.job or '-'}")
    click.echo(f"  Type:       {format_enum(job.spec.type)}")
    click.echo(f"  Agent:      {format_enum(job.spec.agent)}")
    click.echo(f"  Refs:       {format_refs(job) or '-'}")
    click.echo(f"  State:      {format_enum(status.state)}")
    click.echo(
        f"  Started:    {status.start_time.isoformat() if status.start_time else '-'}"
    )
    click.echo(
        "  Completed:  "
        f"{status.completion_time.isoformat() if status.completion_time else '-'}"
    )
    click.echo(f"  Complete:   {'yes' if job.complete() else 'no'}")
    if status.url:
        click.echo(f"  URL:        {status.url}")
    if job.spec.run_after_success:
        names = ", ".join(child.job or "-" for child in job.spec.run_after_success)
        click.echo(f"  Then:       {names}")
    click.echo()


@cli.command("refs")
@click.argument("path", default="-")
def refs(path: str):
    """Print the refs summary of each job record in PATH."""
    for job in load_or_exit(path):
        click.echo(format_refs(job))


@cli.command("validate")
@click.argument("paths", nargs=-1, required=True)
def validate(paths: tuple[str, ...]):
    """Check that every file in PATHS holds valid job records."""
    failed = 0
    for path in paths:
        try:
            jobs = read_jobs(path)
        except DecodeError as e:
            failed += 1
            click.echo(f"FAIL {path}: {e}", err=True)
            continue
        except click.ClickException as e:
            failed += 1
            click.echo(f"FAIL {path}: {e.format_message()}", err=True)
            continue
        click.echo(f"OK   {path} ({len(jobs)} record{'s' if len(jobs) != 1 else ''})")

    if failed:
        click.echo(f"\n{failed} of {len(paths)} file(s) invalid", err=True)
        sys.exit(1)


@cli.command("list")
@click.argument("path", default="-")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def list_jobs(path: str, json_output: bool):
    """List the job records in PATH."""
    jobs = load_or_exit(path)

    if json_output:
        click.echo(json.dumps([encode_job(job) for job in jobs], indent=2))
        return

    if not jobs:
        click.echo("No jobs found.")
        return

    click.echo(f"\n{'JOB':<40} {'TYPE':<11} {'STATE':<10} {'COMPLETE':<9} {'REFS'}")
    click.echo("-" * 100)
    for job in jobs:
        click.echo(
            f"{(job.spec.job or '-')[:40]:<40} "
            f"{format_enum(job.spec.type):<11} "
            f"{format_enum(job.status.state):<10} "
            f"{('yes' if job.complete() else 'no'):<9} "
            f"{format_refs(job)}"
        )
    click.echo()


def main():
    """Entry point for the prowjob console script."""
    cli()


if __name__ == "__main__":
    main()
