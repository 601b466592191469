"""Pick an output mode and render command results in it.

Commands hand their result to :meth:`OutputFormatter.output` and never branch
on the format themselves.  In JSON mode every result becomes one envelope on
stdout; otherwise the result's type picks the Rich view:

======================  ==============================
result                  view
======================  ==============================
``TelemetrySnapshot``   interfaces, active IPs, users
``UserDetail``          summary, sessions, history
``list[UserView]``      user table
``list[LogEntry]``      log table
anything else           ``message`` or ``str(data)``
======================  ==============================
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from rich.console import Console

from routerwatch.models.snapshot import LogEntry, TelemetrySnapshot, UserDetail, UserView
from routerwatch.output.json_output import dumps, error_envelope, success_envelope
from routerwatch.output.rich_output import RichOutput

if TYPE_CHECKING:
    from collections.abc import Sequence
    from io import TextIOBase

FORMATS = ("rich", "json", "quiet")


class OutputFormatter:
    """Routes results to a JSON envelope or a Rich view.

    ``force_format`` wins when given.  Otherwise a TTY *stream* gets
    ``"rich"`` and anything else (pipes, files, CliRunner) gets ``"json"``.
    ``"quiet"`` renders the Rich views on stderr so stdout stays empty.
    """

    def __init__(
        self,
        *,
        stream: TextIOBase | Any | None = None,
        force_format: str | None = None,
    ) -> None:
        self._stream = stream or sys.stdout
        if force_format is not None:
            self._format = force_format
        elif getattr(self._stream, "isatty", None) and self._stream.isatty():
            self._format = "rich"
        else:
            self._format = "json"
        self._console = Console(stderr=self._format == "quiet")
        self._rich = RichOutput(self._console)

    @property
    def format(self) -> str:  # noqa: A003
        return self._format

    @property
    def console(self) -> Console:
        return self._console

    @property
    def rich(self) -> RichOutput:
        return self._rich

    def output(
        self,
        data: Any,
        *,
        command: str,
        message: str = "",
        notes: Sequence[str] = (),
    ) -> None:
        """Emit one command result.

        *message* replaces the default Rich rendering of plain payloads
        (command acknowledgements); *notes* are extra dim lines shown after
        the Rich view and omitted from JSON.
        """
        if self._format == "json":
            self._print(dumps(success_envelope(command, data)))
            return

        if isinstance(data, TelemetrySnapshot):
            self._rich.snapshot(data)
        elif isinstance(data, UserDetail):
            self._rich.user_detail(data)
        elif isinstance(data, list) and data and isinstance(data[0], UserView):
            self._rich.user_list(data)
        elif isinstance(data, list) and data and isinstance(data[0], LogEntry):
            self._rich.log_entries(data)
        elif isinstance(data, list) and not data:
            self._rich.info(f"[dim]Nothing to show for {command}.[/dim]")
        elif message:
            self._rich.command_result(True, message)
        else:
            self._rich.info(str(data))

        for note in notes:
            self._rich.info(f"[dim]{note}[/dim]")

    def output_error(self, *, code: str, message: str, command: str, hint: str = "") -> None:
        if self._format == "json":
            self._print(dumps(error_envelope(command, code, message, hint=hint)))
            return
        self._rich.error(message)
        if hint:
            self._rich.info(f"[dim]{hint}[/dim]")

    def _print(self, text: str) -> None:
        print(text)  # noqa: T201
