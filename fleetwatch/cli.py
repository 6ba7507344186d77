"""
Command-line interface for fleetwatch.

Provides commands to serve the alerts API, compute the ranked alert list
once, and act on persisted alerts.

Usage:
    fleetwatch serve              # Run the API server
    fleetwatch scan               # Print ranked alerts for current sessions
    fleetwatch show ALERT_ID      # Show a persisted alert
    fleetwatch resolve ALERT_ID   # Resolve an alert (dismisses auto-alert patterns)
    fleetwatch reopen ALERT_ID    # Un-resolve a persisted alert
    fleetwatch dismiss ALERT_ID   # Delete an alert / dismiss an auto-alert pattern
    fleetwatch notify AGENT MSG   # Raise an alert on behalf of an agent
    fleetwatch pending            # List queued notifications
"""

import asyncio
import json
import sys

import click

from fleetwatch.config.settings import get_settings
from fleetwatch.observability.logging import setup_logging
from fleetwatch.observability.metrics import get_metrics

SEVERITY_COLORS = {
    "critical": "red",
    "high": "yellow",
    "medium": "cyan",
    "low": "white",
}


def _build_store():
    from fleetwatch.alerts.config import AlertStoreConfig
    from fleetwatch.alerts.store import AlertStore

    return AlertStore(get_settings().alerts_path, config=AlertStoreConfig())


def _fail(message: str) -> None:
    click.secho(message, fg="red", err=True)
    sys.exit(1)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Fleetwatch - alerts for autonomous agent sessions."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(
    host: str | None,
    port: int | None,
    reload: bool,
    metrics: bool,
    metrics_port: int | None,
) -> None:
    """Start the alerts API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    click.echo(f"Starting API server on {host}:{port}")
    if metrics:
        metrics_port = metrics_port or settings.metrics_port
        get_metrics().start_server(port=metrics_port)
        click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "fleetwatch.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command()
@click.option("--include-persisted", is_flag=True, help="Merge unresolved persisted alerts")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def scan(include_persisted: bool, as_json: bool) -> None:
    """Analyse current sessions and print ranked alerts.

    Example:
        fleetwatch scan
        fleetwatch scan --include-persisted --json
    """
    from fleetwatch.alerts.service import AlertMonitor
    from fleetwatch.analysis.config import AnalysisConfig
    from fleetwatch.sessions.directory import SessionDirectory
    from fleetwatch.sessions.transcripts import TranscriptReader

    settings = get_settings()
    monitor = AlertMonitor(
        config=AnalysisConfig(),
        directory=SessionDirectory(settings.sessions_dir),
        transcripts=TranscriptReader(settings.sessions_dir),
        store=_build_store(),
    )

    summary = asyncio.run(monitor.list_alerts(include_persisted=include_persisted))

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    click.echo(
        f"{summary.total} alert(s): {summary.critical_count} critical, "
        f"{summary.high_count} high"
    )
    for alert in summary.alerts:
        label = click.style(f"[{alert.severity:>8}]", fg=SEVERITY_COLORS[alert.severity])
        click.echo(f"{label} {alert.kind:<17} {alert.agent.agent_name}: {alert.message}")
        click.echo(f"           id={alert.alert_id}")
        if alert.details:
            click.echo(f"           {alert.details}")


@main.command()
@click.argument("alert_id")
def show(alert_id: str) -> None:
    """Show a persisted alert."""
    from fleetwatch.alerts.store import AlertNotFoundError

    try:
        alert = asyncio.run(_build_store().get_alert(alert_id))
    except AlertNotFoundError:
        _fail(f"Alert not found: {alert_id}")
        return
    click.echo(json.dumps(alert.to_dict(), indent=2))


@main.command()
@click.argument("alert_id")
@click.option("--by", "resolved_by", default=None, help="Who is resolving (default from config)")
def resolve(alert_id: str, resolved_by: str | None) -> None:
    """Resolve an alert; auto-generated ids dismiss their pattern."""
    from fleetwatch.alerts.store import AlertNotFoundError, AlertPersistenceError

    try:
        result = asyncio.run(
            _build_store().update_alert(alert_id, resolved=True, resolved_by=resolved_by)
        )
    except AlertNotFoundError:
        _fail(f"Alert not found: {alert_id}")
        return
    except AlertPersistenceError as e:
        _fail(str(e))
        return

    if result.dismissed:
        click.echo(f"Dismissed pattern {result.dismissed_pattern}")
    else:
        click.echo(f"Resolved {alert_id} by {result.alert.resolved_by}")


@main.command()
@click.argument("alert_id")
def reopen(alert_id: str) -> None:
    """Mark a persisted alert unresolved."""
    from fleetwatch.alerts.store import AlertNotFoundError, AlertPersistenceError

    try:
        asyncio.run(_build_store().update_alert(alert_id, resolved=False))
    except AlertNotFoundError:
        _fail(f"Alert not found: {alert_id}")
        return
    except AlertPersistenceError as e:
        _fail(str(e))
        return
    click.echo(f"Reopened {alert_id}")


@main.command()
@click.argument("alert_id")
def dismiss(alert_id: str) -> None:
    """Delete a persisted alert or dismiss an auto-alert pattern."""
    from fleetwatch.alerts.store import AlertNotFoundError, AlertPersistenceError

    try:
        result = asyncio.run(_build_store().delete_alert(alert_id))
    except AlertNotFoundError:
        _fail(f"Alert not found: {alert_id}")
        return
    except AlertPersistenceError as e:
        _fail(str(e))
        return

    if result.dismissed:
        click.echo(f"Dismissed pattern {result.dismissed_pattern}")
    else:
        click.echo(f"Removed {alert_id}")


@main.command()
@click.argument("agent")
@click.argument("message")
@click.option(
    "--priority",
    type=click.Choice(["info", "needs-input", "blocked", "urgent"]),
    default="info",
    help="Alert priority",
)
@click.option("--details", default=None, help="Additional context")
@click.option("--task-id", default=None, help="Related task id")
def notify(agent: str, message: str, priority: str, details: str | None, task_id: str | None) -> None:
    """Raise a persisted alert on behalf of an agent."""
    from fleetwatch.alerts.config import AlertStoreConfig
    from fleetwatch.alerts.notifications import NotificationQueue, should_notify
    from fleetwatch.alerts.store import AlertPersistenceError

    config = AlertStoreConfig()
    store = _build_store()
    queue = NotificationQueue(get_settings().pending_notifications_path, config=config)

    async def run():
        alert = await store.create_alert(
            agent=agent, message=message, priority=priority, details=details, task_id=task_id,
        )
        queued = await queue.enqueue(alert) if should_notify(alert, config) else False
        return alert, queued

    try:
        alert, queued = asyncio.run(run())
    except AlertPersistenceError as e:
        _fail(str(e))
        return

    click.echo(f"Created {alert.alert_id} ({alert.priority})")
    if queued:
        click.echo(f"Queued for {config.notify_channel} dispatch")


@main.command()
def pending() -> None:
    """List notifications waiting for dispatch."""
    from fleetwatch.alerts.notifications import NotificationQueue

    queue = NotificationQueue(get_settings().pending_notifications_path)
    items = asyncio.run(queue.pending())
    click.echo(json.dumps({"pending": items, "count": len(items)}, indent=2))


if __name__ == "__main__":
    main()
