"""Pulse CLI entry point."""

import logging
import os
import sys
from pathlib import Path

import click

from cli.src.client import DEFAULT_SERVER, PulseClient
from cli.src.render import execution_line, format_status, print_execution, print_pipeline
from cli.src.templates import PULSEFILE_TEMPLATE
from core.src.engine import execute_pipeline
from core.src.errors import ApiError, ParseError
from core.src.models import (
    GitEvent,
    GitEventKind,
    PipelineStatus,
    normalize_repo_identifier,
    repository_from_identifier,
)
from core.src.parser import parse_pulsefile

logger = logging.getLogger(__name__)


def fail(message: str):
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def read_pulsefile(path: str) -> str:
    try:
        return Path(path).read_text()
    except OSError as e:
        fail(f"Cannot read {path}: {e.strerror or e}")


def load_pipeline(path: str):
    """Parse a Pulsefile, reporting errors with the offending line."""
    try:
        return parse_pulsefile(read_pulsefile(path))
    except ParseError as e:
        click.echo(f"{path}: {e}", err=True)
        context = e.context()
        if context:
            click.echo(context, err=True)
        sys.exit(1)


def get_client(ctx) -> PulseClient:
    client = PulseClient(ctx.obj["server"])
    ctx.call_on_close(client.close)
    return client


@click.group()
@click.option("--server", envvar="PULSE_SERVER", default=DEFAULT_SERVER, show_default=True,
              help="Pulse API server URL (overrides $PULSE_SERVER)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, server, verbose):
    """Pulse - Git-triggered CI/CD pipelines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["server"] = server


@cli.command()
@click.pass_context
def health(ctx):
    """Check server health."""
    try:
        status = get_client(ctx).health()
    except ApiError as e:
        fail(f"Server is unhealthy: {e}")
    click.echo(f"Server is {status.get('status', 'unknown')} ({status.get('service', ctx.obj['server'])})")


@cli.command()
@click.option("--path", "path", default="Pulsefile", type=click.Path(dir_okay=False), show_default=True,
              help="Where to write the template")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(path, force):
    """Create a starter Pulsefile."""
    target = Path(path)
    if target.exists() and not force:
        fail(f"{target} already exists. Use --force to overwrite.")

    target.write_text(PULSEFILE_TEMPLATE)
    click.echo(f"Created {target}")


@cli.command()
@click.argument("pulsefile", default="Pulsefile", type=click.Path(dir_okay=False))
def validate(pulsefile):
    """Parse a Pulsefile and summarize it."""
    pipeline = load_pipeline(pulsefile)
    click.echo(f"{pulsefile} is valid\n")
    print_pipeline(pipeline)


@cli.command()
@click.option("--pulsefile", "-p", default="Pulsefile", type=click.Path(dir_okay=False), show_default=True,
              help="Path to Pulsefile")
@click.option("--repo-url", "-r", default="local/repo", show_default=True,
              help="Repository the run is attributed to")
@click.option("--branch", "-b", default="main", show_default=True, help="Branch of the synthesized event")
@click.option("--event", "event_kind", type=click.Choice([k.value for k in GitEventKind]), default="push",
              show_default=True, help="Kind of the synthesized event")
@click.option("--tag", default=None, help="Tag of the synthesized event")
@click.option("--timeout", type=float, default=None, help="Per-step timeout in seconds")
def run(pulsefile, repo_url, branch, event_kind, tag, timeout):
    """Execute a Pulsefile locally against a synthesized git event."""
    pipeline = load_pipeline(pulsefile)

    event = GitEvent(
        kind=GitEventKind(event_kind),
        repository=repository_from_identifier(repo_url, clone_url=repo_url, default_branch=branch),
        branch=None if event_kind == GitEventKind.PULL_REQUEST.value else branch,
        tag=tag,
        sender=os.environ.get("USER", "local"),
    )

    click.echo(f"Running pipeline '{pipeline.name}' ({len(pipeline.steps)} steps)\n")

    def on_step_finished(_, position, result):
        click.echo(f"  [{position + 1}/{len(pipeline.steps)}] {result.step_name or '<unnamed>'} {format_status(result.status)}")

    execution = execute_pipeline(
        pipeline,
        event,
        working_directory=os.getcwd(),
        step_timeout=timeout,
        on_step_finished=on_step_finished,
    )

    click.echo("")
    print_execution(execution)

    if execution.status not in (PipelineStatus.SUCCESS, PipelineStatus.SKIPPED):
        sys.exit(1)


@cli.command(name="list")
@click.option("--limit", "-l", default=20, show_default=True, help="Number of executions to show")
@click.option("--status", type=click.Choice([s.value for s in PipelineStatus]), default=None,
              help="Only show executions with this status")
@click.pass_context
def list_executions(ctx, limit, status):
    """List pipeline executions."""
    try:
        executions = get_client(ctx).list_executions(limit=limit, status=status)
    except ApiError as e:
        fail(f"Failed to list executions: {e}")

    click.echo(f"Found {len(executions)} execution(s):\n")
    for execution in executions:
        click.echo(f"  {execution_line(execution)}")


@cli.command()
@click.argument("execution_id", type=click.UUID)
@click.pass_context
def status(ctx, execution_id):
    """Show a pipeline execution."""
    try:
        execution = get_client(ctx).get_execution(execution_id)
    except ApiError as e:
        fail(f"Failed to get execution: {e}")
    print_execution(execution, show_output=False)


@cli.command()
@click.argument("job_id")
@click.pass_context
def job(ctx, job_id):
    """Show the live status of a queued job."""
    try:
        info = get_client(ctx).get_job(job_id)
    except ApiError as e:
        fail(f"Failed to get job: {e}")

    click.echo(f"Job: {info['job_id']}")
    click.echo(f"Status: {format_status(info['status'])}")
    if info.get("execution_id"):
        click.echo(f"Execution: {info['execution_id']}")
    for position, step_status in sorted(info.get("steps", {}).items(), key=lambda item: int(item[0])):
        click.echo(f"  step {int(position) + 1}: {format_status(step_status)}")


@cli.group()
def repo():
    """Manage registered repositories."""


@repo.command(name="add")
@click.argument("repo_url")
@click.option("--pulsefile", "-p", default="Pulsefile", type=click.Path(dir_okay=False), show_default=True,
              help="Path to Pulsefile")
@click.option("--repo-type", "-t", default="github", show_default=True, help="Repository type")
@click.pass_context
def repo_add(ctx, repo_url, pulsefile, repo_type):
    """Register a repository and upload its Pulsefile."""
    # Fail fast on a broken Pulsefile before talking to the server
    load_pipeline(pulsefile)

    try:
        response = get_client(ctx).register_repo(repo_url, read_pulsefile(pulsefile), repo_type)
    except ApiError as e:
        fail(f"Failed to register repository: {e}")
    click.echo(f"Registered {response['repo_identifier']}")


@repo.command(name="remove")
@click.argument("repo_url")
@click.pass_context
def repo_remove(ctx, repo_url):
    """Unregister a repository."""
    identifier = normalize_repo_identifier(repo_url)
    try:
        get_client(ctx).unregister_repo(identifier)
    except ApiError as e:
        fail(f"Failed to unregister {identifier}: {e}")
    click.echo(f"Unregistered {identifier}")


@repo.command(name="list")
@click.pass_context
def repo_list(ctx):
    """List registered repositories."""
    try:
        repos = get_client(ctx).list_repos()
    except ApiError as e:
        fail(f"Failed to list repositories: {e}")

    if not repos:
        click.echo("No repositories registered")
        return
    for registered in repos:
        click.echo(f"  {registered['full_name']}  ({registered['repo_type']}, {registered['repo_url']})")


@cli.group()
def pipeline():
    """Inspect and trigger repository pipelines."""


@pipeline.command(name="status")
@click.argument("repo_url")
@click.option("--limit", "-l", default=10, show_default=True, help="Number of runs to show")
@click.pass_context
def pipeline_status(ctx, repo_url, limit):
    """Show recent pipeline runs of a repository."""
    identifier = normalize_repo_identifier(repo_url)
    try:
        executions = get_client(ctx).pipeline_status(identifier, limit=limit)
    except ApiError as e:
        fail(f"Failed to get pipeline status for {identifier}: {e}")

    if not executions:
        click.echo(f"No runs yet for {identifier}")
        return
    click.echo(f"Recent runs of {identifier}:\n")
    for execution in executions:
        click.echo(f"  {execution_line(execution)}")


@pipeline.command(name="logs")
@click.argument("repo_url")
@click.argument("execution_id", type=click.UUID)
@click.pass_context
def pipeline_logs(ctx, repo_url, execution_id):
    """Show step output of a pipeline run."""
    identifier = normalize_repo_identifier(repo_url)
    try:
        execution = get_client(ctx).get_execution(execution_id)
    except ApiError as e:
        fail(f"Failed to get logs: {e}")

    if execution.repository.full_name != identifier:
        fail(f"Execution {execution_id} belongs to {execution.repository.full_name}, not {identifier}")
    print_execution(execution)


@pipeline.command(name="run")
@click.argument("repo_url")
@click.option("--branch", "-b", default=None, help="Branch to run (defaults to main)")
@click.pass_context
def pipeline_run(ctx, repo_url, branch):
    """Queue a run of a registered repository's pipeline."""
    identifier = normalize_repo_identifier(repo_url)
    try:
        response = get_client(ctx).trigger(identifier, branch=branch)
    except ApiError as e:
        fail(f"Failed to trigger {identifier}: {e}")
    click.echo(f"Queued job {response['job_id']} for pipeline '{response['pipeline']}'")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
