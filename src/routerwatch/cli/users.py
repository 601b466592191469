"""CLI commands for hotspot users (list, detail, toggle, enable, disable, remove)."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from routerwatch.api.errors import NotFoundError
from routerwatch.cli._client import router_session, run_async
from routerwatch.cli._options import global_options
from routerwatch.telemetry.correlator import correlate_users

if TYPE_CHECKING:
    from routerwatch.cli.main import AppContext


@click.command("users")
@global_options
def users_cmd(app_ctx: AppContext) -> None:
    """List hotspot users with their online state."""
    run_async(_cmd_users(app_ctx))


async def _cmd_users(app_ctx: AppContext) -> None:
    # Only the two tables the list needs; a failed query is an error here,
    # not a degraded snapshot section.
    async with router_session(app_ctx) as session:
        users, sessions = await asyncio.gather(
            session.api.hotspot_users(), session.api.active_sessions()
        )
    app_ctx.formatter.output(correlate_users(users, sessions), command="users")


@click.command("user")
@click.argument("name")
@global_options
def user_cmd(app_ctx: AppContext, name: str) -> None:
    """Show sessions and host history for user NAME."""
    run_async(_cmd_user(app_ctx, name))


async def _cmd_user(app_ctx: AppContext, name: str) -> None:
    async with router_session(app_ctx) as session:
        detail = await session.queries.get_user_detail(name)
    if detail is None:
        raise NotFoundError("User", name)
    app_ctx.formatter.output(detail, command="user")


@click.command("toggle")
@click.argument("name")
@global_options
def toggle_cmd(app_ctx: AppContext, name: str) -> None:
    """Flip the disabled flag of user NAME."""
    run_async(_cmd_set_disabled(app_ctx, name, None, "toggle"))


@click.command("enable")
@click.argument("name")
@global_options
def enable_cmd(app_ctx: AppContext, name: str) -> None:
    """Allow user NAME to log in."""
    run_async(_cmd_set_disabled(app_ctx, name, False, "enable"))


@click.command("disable")
@click.argument("name")
@global_options
def disable_cmd(app_ctx: AppContext, name: str) -> None:
    """Block user NAME from logging in."""
    run_async(_cmd_set_disabled(app_ctx, name, True, "disable"))


async def _cmd_set_disabled(
    app_ctx: AppContext, name: str, disabled: bool | None, command: str
) -> None:
    async with router_session(app_ctx) as session:
        if disabled is None:
            result = await session.commands.toggle_user_disabled(name)
        else:
            result = await session.commands.set_user_disabled(name, disabled)

    app_ctx.formatter.output(
        {"username": name, "disabled": result},
        command=command,
        message=f"{name} {'disabled' if result else 'enabled'}",
    )


@click.command("remove")
@click.argument("name")
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt")
@global_options
def remove_cmd(app_ctx: AppContext, name: str, yes: bool) -> None:
    """Delete user NAME from the router."""
    if not yes and app_ctx.formatter.format == "rich":
        click.confirm(f"Remove hotspot user {name!r}?", abort=True)
    run_async(_cmd_remove(app_ctx, name))


async def _cmd_remove(app_ctx: AppContext, name: str) -> None:
    async with router_session(app_ctx) as session:
        await session.commands.delete_user(name)
    app_ctx.formatter.output(
        {"username": name, "removed": True}, command="remove", message=f"{name} removed"
    )
