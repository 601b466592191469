"""``routerwatch serve``: poll the router and serve REST + bandwidth stream."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import TYPE_CHECKING, Any

import click

from routerwatch.cli._client import build_settings, run_async
from routerwatch.cli._options import global_options

if TYPE_CHECKING:
    from routerwatch.cli.main import AppContext

logger = logging.getLogger(__name__)


async def _safe_uvicorn_serve(server: Any, port: int) -> None:
    """Run uvicorn.Server.serve() with SystemExit protection.

    Uvicorn calls ``sys.exit(1)`` when it cannot bind the port.
    ``SystemExit`` is a ``BaseException`` that kills the asyncio event
    loop before the owning task can retrieve the exception.  This
    wrapper converts it to a regular ``OSError``.
    """
    try:
        await server.serve()
    except SystemExit as exc:
        if exc.code == 0:
            logger.debug("Uvicorn exited cleanly (code 0) on port %d", port)
            return
        raise OSError(f"REST server failed to start on port {port}") from exc


@click.command("serve")
@click.option("--http-port", type=int, default=None, help="REST API port (default: 3000)")
@click.option(
    "--stream-port", type=int, default=None, help="Bandwidth stream port (default: 9090)"
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Poll interval in seconds (default: 3)",
)
@global_options
def serve_cmd(
    app_ctx: AppContext,
    http_port: int | None,
    stream_port: int | None,
    interval: float | None,
) -> None:
    """Poll the router continuously and serve the REST API and live stream.

    Runs until Ctrl+C or SIGTERM.
    """
    run_async(
        _cmd_serve(app_ctx, http_port=http_port, stream_port=stream_port, interval=interval)
    )


async def _cmd_serve(
    app_ctx: AppContext,
    *,
    http_port: int | None,
    stream_port: int | None,
    interval: float | None,
) -> None:
    import uvicorn

    from routerwatch.http.app import create_app
    from routerwatch.telemetry.setup import monitor_session

    formatter = app_ctx.formatter
    settings = build_settings(
        app_ctx, http_port=http_port, stream_port=stream_port, poll_interval=interval
    )
    # Fail fast on a missing router host before any port is bound.
    base_url = settings.base_url

    # -- SIGTERM / SIGINT handler for graceful container/systemd shutdown --
    shutdown_event = asyncio.Event()

    def _handle_signal() -> None:
        logger.info("Shutdown signal received, stopping")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig_name in ("SIGTERM", "SIGINT"):
        sig = getattr(signal, sig_name, None)
        if sig is not None:
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, _handle_signal)

    async with monitor_session(settings) as session:
        uvi_server = uvicorn.Server(
            uvicorn.Config(
                create_app(session),
                host=settings.http_host,
                port=settings.http_port,
                log_level="warning",
            )
        )
        http_task = asyncio.create_task(_safe_uvicorn_serve(uvi_server, settings.http_port))
        try:
            # Give uvicorn a moment to bind the port.
            await asyncio.sleep(0.5)
            if http_task.done():
                exc = http_task.exception()
                if exc is not None:
                    raise OSError(
                        f"Failed to start REST server on port {settings.http_port}: {exc}"
                    ) from exc

            stream_port_bound = session.stream.port if session.stream else settings.stream_port
            if formatter.format == "json":
                formatter.output(
                    {
                        "router": base_url,
                        "httpPort": settings.http_port,
                        "streamPort": stream_port_bound,
                        "interval": settings.poll_interval,
                    },
                    command="serve",
                )
            elif formatter.format == "rich":
                formatter.rich.info(
                    f"Polling [cyan]{base_url}[/cyan] every {settings.poll_interval:g}s"
                )
                formatter.rich.info(
                    f"REST API on http://{settings.http_host}:{settings.http_port}/api"
                )
                formatter.rich.info(
                    f"Bandwidth stream on ws://{settings.stream_host}:{stream_port_bound}"
                )
                formatter.rich.info("Press Ctrl+C to stop.")

            await _wait_for_shutdown(shutdown_event, http_task)
        finally:
            # Ask uvicorn to exit rather than cancelling it, so Starlette's
            # lifespan shuts down cleanly.
            uvi_server.should_exit = True
            if not http_task.done():
                with contextlib.suppress(asyncio.CancelledError):
                    await http_task

    if formatter.format == "rich":
        scheduler = session.scheduler
        formatter.rich.info(
            f"[dim]{scheduler.cycle_count} poll cycles, {scheduler.missed_count} skipped, "
            f"{session.hub.publish_count} snapshots published[/dim]"
        )


async def _wait_for_shutdown(
    shutdown_event: asyncio.Event, server_task: asyncio.Task[None]
) -> None:
    """Block until *shutdown_event* fires or the REST server exits on its own."""
    waiter = asyncio.create_task(shutdown_event.wait())
    done, pending = await asyncio.wait(
        [waiter, server_task],
        return_when=asyncio.FIRST_COMPLETED,
    )
    for t in pending:
        if t is waiter:
            t.cancel()
    # Re-raise a REST server failure.
    if server_task in done:
        server_task.result()
