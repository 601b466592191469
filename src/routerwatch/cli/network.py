"""CLI commands for network-wide views (snapshot, logs)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from routerwatch.cli._client import router_session, run_async
from routerwatch.cli._options import global_options

if TYPE_CHECKING:
    from routerwatch.cli.main import AppContext


@click.command("snapshot")
@global_options
def snapshot_cmd(app_ctx: AppContext) -> None:
    """Poll the router once and print interfaces, addresses and users."""
    run_async(_cmd_snapshot(app_ctx))


async def _cmd_snapshot(app_ctx: AppContext) -> None:
    async with router_session(app_ctx) as session:
        await session.source.connect()
        snapshot = await session.aggregator.take_snapshot()

    failures = session.aggregator.last_failures
    app_ctx.formatter.output(
        snapshot,
        command="snapshot",
        notes=[f"Degraded sections: {', '.join(failures)}"] if failures else (),
    )


@click.command("logs")
@click.option("--limit", type=int, default=None, help="Show only the newest N entries")
@global_options
def logs_cmd(app_ctx: AppContext, limit: int | None) -> None:
    """Show the router's log buffer."""
    run_async(_cmd_logs(app_ctx, limit))


async def _cmd_logs(app_ctx: AppContext, limit: int | None) -> None:
    async with router_session(app_ctx) as session:
        entries = await session.queries.logs()

    if limit is not None and limit >= 0:
        entries = entries[-limit:] if limit else []
    app_ctx.formatter.output(entries, command="logs")
