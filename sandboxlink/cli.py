from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from sandboxlink.client.errors import OrchestratorError, ResourceNotFoundError, error_title, to_api_error
from sandboxlink.client.health import HealthMonitor
from sandboxlink.client.log import setup_logging
from sandboxlink.client.models import ConnectionStatus, Conversation
from sandboxlink.client.services import DataService, create_data_service
from sandboxlink.client.settings import SandboxSettings, get_settings

T = TypeVar("T")


def _run(ctx: click.Context, work: Callable[[DataService, SandboxSettings], Awaitable[T]]) -> T:
    """Run *work* against a fresh data service, turning client errors into CLI errors."""
    settings: SandboxSettings = ctx.obj

    async def runner() -> T:
        service = create_data_service(settings)
        try:
            return await work(service, settings)
        finally:
            await service.aclose()

    try:
        return asyncio.run(runner())
    except (OrchestratorError, ResourceNotFoundError) as exc:
        error = to_api_error(exc)
        raise click.ClickException(f"{error_title(error.code)}: {error.message}") from exc


@click.group()
@click.option("--endpoint", default=None, help="Orchestrator URL (default: from SANDBOXLINK_ORCHESTRATOR_URL).")
@click.option("--demo", is_flag=True, default=False, help="Use built-in demo data instead of the orchestrator.")
@click.pass_context
def main(ctx: click.Context, endpoint: str | None, demo: bool) -> None:
    """Sandboxlink - client for remote coding-agent sandboxes."""
    settings = get_settings()
    overrides: dict[str, object] = {}
    if endpoint:
        overrides["orchestrator_url"] = endpoint
    if demo:
        overrides["demo_mode"] = True
    ctx.obj = settings.model_copy(update=overrides) if overrides else settings
    setup_logging(ctx.obj.log_level)


@main.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check the orchestrator once."""

    async def work(service: DataService, settings: SandboxSettings) -> tuple[ConnectionStatus, str | None]:
        monitor = HealthMonitor(service, interval=settings.health_check_interval)
        status = await monitor.check_now()
        return status, monitor.version

    status, version = _run(ctx, work)
    suffix = f" (version {version})" if version else ""
    click.echo(f"{status}{suffix}")
    if status != ConnectionStatus.CONNECTED:
        ctx.exit(1)


@main.command()
@click.pass_context
def sessions(ctx: click.Context) -> None:
    """List sessions as conversations."""

    async def work(service: DataService, _settings: SandboxSettings) -> list[Conversation]:
        return await service.load_conversations()

    conversations = _run(ctx, work)
    if not conversations:
        click.echo("No sessions.")
        return
    for conversation in conversations:
        click.echo(f"{conversation.id:<8}  {conversation.sandbox_status:<12}  {conversation.title}")


@main.command()
@click.argument("name")
@click.option("--repo", default=None, help="Repository URL to check out in the sandbox.")
@click.pass_context
def create(ctx: click.Context, name: str, repo: str | None) -> None:
    """Create a session named NAME."""

    async def work(service: DataService, _settings: SandboxSettings) -> Conversation:
        return await service.create_conversation(name, repo)

    conversation = _run(ctx, work)
    click.echo(f"Created session {conversation.session_id or conversation.id} ({conversation.title})")


@main.command()
@click.argument("session_id")
@click.pass_context
def delete(ctx: click.Context, session_id: str) -> None:
    """Delete a session by id or short id."""

    async def work(service: DataService, _settings: SandboxSettings) -> None:
        await service.delete_conversation(session_id)

    _run(ctx, work)
    click.echo(f"Deleted session {session_id}")


@main.command()
@click.option("--interval", default=None, type=float, help="Seconds between checks (default: from settings).")
@click.option("--duration", default=None, type=float, help="Stop after this many seconds (default: run until Ctrl-C).")
@click.pass_context
def watch(ctx: click.Context, interval: float | None, duration: float | None) -> None:
    """Print orchestrator status changes as they happen."""

    async def work(service: DataService, settings: SandboxSettings) -> None:
        monitor = HealthMonitor(service, interval=interval or settings.health_check_interval)
        monitor.subscribe(lambda status: click.echo(f"status: {status}"))
        monitor.start()
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            monitor.stop()

    try:
        _run(ctx, work)
    except KeyboardInterrupt:
        click.echo("Stopped.")


if __name__ == "__main__":
    main()
