"""CLI entry-point: Click command group and dispatch."""

from __future__ import annotations

import dataclasses

import click

from routerwatch.api.errors import (
    ConfigError,
    ConnectError,
    MutateError,
    NotFoundError,
    QueryError,
)
from routerwatch.cli._client import configure_logging
from routerwatch.output.formatter import FORMATS, OutputFormatter

# ---------------------------------------------------------------------------
# Application context (stored in ctx.obj)
# ---------------------------------------------------------------------------


@dataclasses.dataclass
class AppContext:
    """Shared state passed to every Click command via ``@click.pass_obj``."""

    output_format: str | None
    quiet: bool
    verbose: bool
    host: str | None = None
    user: str | None = None
    password: str | None = dataclasses.field(default=None, repr=False)
    _formatter: OutputFormatter | None = dataclasses.field(default=None, repr=False)

    @property
    def formatter(self) -> OutputFormatter:
        if self._formatter is None:
            force = "quiet" if self.quiet else self.output_format
            self._formatter = OutputFormatter(force_format=force)
        return self._formatter


# ---------------------------------------------------------------------------
# Root Click group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default=None,
    help="Output format (default: auto-detect)",
)
@click.option("--quiet", is_flag=True, default=False, help="Suppress normal output")
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--host", default=None, help="Router host name or address")
@click.option("--user", default=None, help="Router user name")
@click.option("--password", default=None, help="Router password")
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: str | None,
    quiet: bool,
    verbose: bool,
    host: str | None,
    user: str | None,
    password: str | None,
) -> None:
    """Monitor and administer a RouterOS hotspot."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj = AppContext(
        output_format=output_format,
        quiet=quiet,
        verbose=verbose,
        host=host,
        user=user,
        password=password,
    )


# ---------------------------------------------------------------------------
# Register subcommands (lazy imports keep startup fast)
# ---------------------------------------------------------------------------


def _register_commands() -> None:
    """Import and attach all subcommands to the root CLI."""
    from routerwatch.cli.network import logs_cmd, snapshot_cmd
    from routerwatch.cli.serve import serve_cmd
    from routerwatch.cli.users import (
        disable_cmd,
        enable_cmd,
        remove_cmd,
        toggle_cmd,
        user_cmd,
        users_cmd,
    )

    cli.add_command(serve_cmd)
    cli.add_command(snapshot_cmd)
    cli.add_command(logs_cmd)
    cli.add_command(users_cmd)
    cli.add_command(user_cmd)
    cli.add_command(toggle_cmd)
    cli.add_command(enable_cmd)
    cli.add_command(disable_cmd)
    cli.add_command(remove_cmd)


_register_commands()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to the appropriate command handler."""
    try:
        cli(args=argv, standalone_mode=False)
    except click.exceptions.Exit as exc:
        raise SystemExit(exc.exit_code) from None
    except click.exceptions.Abort:
        raise SystemExit(1) from None
    except click.exceptions.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code) from None
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except SystemExit:
        raise
    except Exception as exc:
        app_ctx = _extract_app_ctx()
        formatter = app_ctx.formatter if app_ctx else OutputFormatter()
        cmd_name = _get_command_name()

        if _handle_known_error(exc, formatter, cmd_name):
            raise SystemExit(1) from exc

        formatter.output_error(
            code=type(exc).__name__,
            message=str(exc),
            command=cmd_name,
        )
        raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# Helpers for error handling
# ---------------------------------------------------------------------------


def _extract_app_ctx() -> AppContext | None:
    """Try to extract AppContext from the current Click context."""
    ctx = click.get_current_context(silent=True)
    while ctx is not None:
        if isinstance(ctx.obj, AppContext):
            return ctx.obj
        ctx = ctx.parent
    return None


def _get_command_name() -> str:
    """Reconstruct a dotted command name from the Click context chain."""
    ctx = click.get_current_context(silent=True)
    parts: list[str] = []
    while ctx is not None:
        if ctx.info_name and ctx.info_name not in ("cli", "routerwatch"):
            parts.append(ctx.info_name)
        ctx = ctx.parent
    return ".".join(reversed(parts)) or "unknown"


_HINTS: dict[type[Exception], tuple[str, str]] = {
    ConfigError: (
        "config_error",
        "Set ROUTERWATCH_ROUTER_HOST (or pass --host) to point at the router.",
    ),
    ConnectError: (
        "router_unreachable",
        "Check the router address, credentials and that the REST API (www service) is enabled.",
    ),
    NotFoundError: ("not_found", ""),
    MutateError: ("command_rejected", "The router refused the change; nothing was applied."),
    QueryError: ("query_failed", "Run with --verbose to see the failing router command."),
}


def _handle_known_error(
    exc: Exception,
    formatter: OutputFormatter,
    cmd_name: str,
) -> bool:
    """Handle well-known errors with friendly output.

    Returns ``True`` if the error was handled and the caller should exit.
    """
    for exc_type, (code, hint) in _HINTS.items():
        if isinstance(exc, exc_type):
            formatter.output_error(code=code, message=str(exc), command=cmd_name, hint=hint)
            return True
    return False
