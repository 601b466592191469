"""Shared CLI decorator that propagates global options to leaf commands."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

import click

from routerwatch.cli._client import configure_logging
from routerwatch.output.formatter import FORMATS

if TYPE_CHECKING:
    from routerwatch.cli.main import AppContext


def global_options(f: Any) -> Any:
    """Add global CLI options to a leaf command.

    Allows ``--format``, ``--quiet``, ``--verbose``, ``--host``, ``--user``
    and ``--password`` to be given **after** the subcommand name (e.g.
    ``routerwatch users --host 10.0.0.1``).  Command-level values override
    the root-group values stored in :class:`AppContext`.
    """

    @click.option("--password", "local_password", default=None, help="Router password")
    @click.option("--user", "local_user", default=None, help="Router user name")
    @click.option("--host", "local_host", default=None, help="Router host name or address")
    @click.option(
        "--verbose",
        "local_verbose",
        is_flag=True,
        default=False,
        help="Enable verbose logging",
    )
    @click.option(
        "--quiet",
        "local_quiet",
        is_flag=True,
        default=False,
        help="Suppress normal output",
    )
    @click.option(
        "--format",
        "local_output_format",
        type=click.Choice(FORMATS),
        default=None,
        help="Output format (default: auto-detect)",
    )
    @click.pass_obj
    def wrapper(app_ctx: AppContext, /, **kwargs: Any) -> Any:
        local_output_format: str | None = kwargs.pop("local_output_format", None)
        local_quiet: bool = kwargs.pop("local_quiet", False)
        local_verbose: bool = kwargs.pop("local_verbose", False)
        local_host: str | None = kwargs.pop("local_host", None)
        local_user: str | None = kwargs.pop("local_user", None)
        local_password: str | None = kwargs.pop("local_password", None)

        # Command-level wins
        if local_output_format is not None:
            app_ctx.output_format = local_output_format
            app_ctx._formatter = None
        if local_quiet:
            app_ctx.quiet = True
            app_ctx._formatter = None
        if local_verbose:
            app_ctx.verbose = True
            configure_logging(verbose=True)
        if local_host is not None:
            app_ctx.host = local_host
        if local_user is not None:
            app_ctx.user = local_user
        if local_password is not None:
            app_ctx.password = local_password

        return f(app_ctx, **kwargs)

    functools.update_wrapper(wrapper, f)
    return wrapper
