"""Terminal rendering of execution records."""

from typing import Optional

import click

from core.src.models import PipelineDefinition, PipelineExecution, PipelineStatus, StepStatus

STATUS_COLORS = {
    "success": "green",
    "failed": "red",
    "skipped": "yellow",
    "running": "blue",
    "cancelled": "magenta",
}


def format_status(status) -> str:
    value = getattr(status, "value", status)
    return click.style(value.upper(), fg=STATUS_COLORS.get(value), bold=True)


def format_duration(duration_ms: Optional[int]) -> str:
    if duration_ms is None:
        return "-"
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    seconds = duration_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, seconds = divmod(int(seconds), 60)
    return f"{minutes}m{seconds:02d}s"


def execution_line(execution: PipelineExecution) -> str:
    return (
        f"{execution.id}  {execution.pipeline_name} [{execution.repository.full_name}]  "
        f"{format_status(execution.status)}  {format_duration(execution.duration_ms)}"
    )


def print_execution(execution: PipelineExecution, show_output: bool = True):
    event = execution.git_event
    click.echo(f"Execution: {execution.id}")
    click.echo(f"Pipeline: {execution.pipeline_name} (v{execution.pipeline_version})")
    click.echo(f"Repository: {execution.repository.full_name}")
    click.echo(f"Event: {event.kind.value} {event.branch or event.tag or ''}".rstrip())
    click.echo(f"Status: {format_status(execution.status)}")
    click.echo(f"Started: {execution.started_at.isoformat()}")
    if execution.completed_at:
        click.echo(f"Completed: {execution.completed_at.isoformat()}")
        click.echo(f"Duration: {format_duration(execution.duration_ms)}")

    if execution.status == PipelineStatus.SKIPPED:
        click.echo("\nEvent did not match the pipeline triggers, no steps ran.")
        return

    click.echo("\nSteps:")
    for index, result in enumerate(execution.step_results, start=1):
        exit_code = "" if result.exit_code is None else f" (exit {result.exit_code})"
        click.echo(
            f"\n  {index}. {result.step_name or '<unnamed>'} - {format_status(result.status)}"
            f"{exit_code} in {format_duration(result.duration_ms)}"
        )
        if not show_output:
            continue
        if result.stdout.strip():
            click.echo(_indent(result.stdout))
        if result.stderr.strip():
            click.echo(_indent(result.stderr, prefix="     ! "), err=result.status == StepStatus.FAILED)


def print_pipeline(pipeline: PipelineDefinition):
    triggers = pipeline.triggers
    enabled = [
        name[len("on_"):]
        for name, value in triggers.model_dump().items()
        if name.startswith("on_") and value
    ]

    click.echo(f"Pipeline: {pipeline.name} (v{pipeline.version})")
    click.echo(f"Triggers: {', '.join(enabled) or 'none'}")
    click.echo(f"Branches: {', '.join(triggers.branch_patterns)}")
    click.echo(f"Steps: {len(pipeline.steps)}")
    for index, step in enumerate(pipeline.steps, start=1):
        suffix = " (allow failure)" if step.allow_failure else ""
        click.echo(f"  {index}. {step.name or '<unnamed>'}{suffix}")


def _indent(text: str, prefix: str = "     ") -> str:
    return "\n".join(prefix + line for line in text.rstrip().splitlines())
