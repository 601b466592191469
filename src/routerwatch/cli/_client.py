"""Shared helpers for CLI commands: settings, logging and router sessions."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler

from routerwatch.models.config import AppSettings
from routerwatch.telemetry.setup import build_session

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Coroutine

    from routerwatch.cli.main import AppContext
    from routerwatch.telemetry.setup import MonitorSession

NOISY_LOGGERS = ("httpx", "httpcore", "websockets", "uvicorn", "uvicorn.error")


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run an async coroutine from a synchronous click callback."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures

        with concurrent.futures.ThreadPoolExecutor() as pool:
            return pool.submit(asyncio.run, coro).result()
    return asyncio.run(coro)


def configure_logging(verbose: bool) -> None:
    """Route ``routerwatch`` log records through a Rich handler on stderr.

    Safe to call more than once; the handler is installed only once and
    the level follows the latest *verbose* value.
    """
    root = logging.getLogger("routerwatch")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_settings(app_ctx: AppContext, **overrides: Any) -> AppSettings:
    """Load :class:`AppSettings` with command-line values taking precedence."""
    values: dict[str, Any] = {
        "router_host": app_ctx.host,
        "router_user": app_ctx.user,
        "router_password": app_ctx.password,
        **overrides,
    }
    return AppSettings(**{k: v for k, v in values.items() if v is not None})


@asynccontextmanager
async def router_session(app_ctx: AppContext) -> AsyncIterator[MonitorSession]:
    """Yield an idle session (no polling, no stream server) for one-shot commands."""
    session = build_session(build_settings(app_ctx))
    try:
        yield session
    finally:
        await session.source.close()
