from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from routerwatch.models.snapshot import (
        LogEntry,
        TelemetrySnapshot,
        UserDetail,
        UserView,
    )


def format_bytes(count: int) -> str:
    """Human-readable byte count (``1536`` → ``"1.5 KiB"``)."""
    value = float(count)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024:
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TiB"


def format_duration(seconds: int) -> str:
    """Compact duration (``93784`` → ``"1d2h3m4s"``)."""
    if seconds <= 0:
        return "0s"
    parts: list[str] = []
    for unit, size in (("w", 604800), ("d", 86400), ("h", 3600), ("m", 60), ("s", 1)):
        value, seconds = divmod(seconds, size)
        if value:
            parts.append(f"{value}{unit}")
    return "".join(parts)


class RichOutput:
    """Rich-based terminal output helpers for *routerwatch*."""

    def __init__(self, console: Console) -> None:
        self._con = console

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self, snap: TelemetrySnapshot) -> None:
        """Print interfaces, active addresses and users of one snapshot."""
        self._con.print(
            Panel(
                f"[bold]Snapshot #{snap.sequence_number}[/bold]  "
                f"[dim]{snap.taken_at.isoformat()}[/dim]",
                expand=False,
            )
        )

        table = Table(title="Interfaces")
        table.add_column("Interface", style="cyan")
        table.add_column("RX kbps", justify="right")
        table.add_column("TX kbps", justify="right")
        for iface in snap.interfaces:
            table.add_row(iface.name, f"{iface.rx_kbps:.1f}", f"{iface.tx_kbps:.1f}")
        self._con.print(table)

        usage = Table(title=f"Active IPs ({len(snap.active_ips)})")
        usage.add_column("Address", style="cyan")
        usage.add_column("RX B/s", justify="right")
        usage.add_column("TX B/s", justify="right")
        for ip in sorted(snap.active_ips):
            sample = snap.usage_by_ip.get(ip)
            rx = sample.rx if sample else 0.0
            tx = sample.tx if sample else 0.0
            usage.add_row(ip, f"{rx:.0f}", f"{tx:.0f}")
        self._con.print(usage)

        self.user_list(list(snap.users))

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def user_list(self, users: list[UserView]) -> None:
        """Print a table of hotspot users."""
        table = Table(title="Hotspot Users")
        table.add_column("User", style="cyan")
        table.add_column("Profile")
        table.add_column("State")
        table.add_column("Sessions", justify="right")
        table.add_column("Address")
        table.add_column("Uptime", justify="right")
        table.add_column("In / Out", justify="right")

        for u in users:
            if u.disabled:
                state = "[red]disabled[/red]"
            elif u.is_online:
                state = "[green]online[/green]"
            else:
                state = "[yellow]offline[/yellow]"
            table.add_row(
                u.username,
                u.profile,
                state,
                str(u.active_session_count),
                u.address or "",
                format_duration(u.uptime_seconds),
                f"{format_bytes(u.bytes_in)} / {format_bytes(u.bytes_out)}",
            )

        self._con.print(table)

    def user_detail(self, detail: UserDetail) -> None:
        """Print a user's summary followed by sessions and host history."""
        self.user_list([detail])
        if detail.comment:
            self._con.print(f"[dim]Comment:[/dim] {detail.comment}")

        sessions = Table(title="Active Sessions")
        sessions.add_column("Address", style="cyan")
        sessions.add_column("MAC")
        sessions.add_column("Login time")
        sessions.add_column("Uptime", justify="right")
        sessions.add_column("In / Out", justify="right")
        for s in detail.sessions:
            sessions.add_row(
                s.ip_address or "",
                s.mac_address or "",
                s.login_time.isoformat(timespec="seconds") if s.login_time else "",
                format_duration(s.uptime_seconds),
                f"{format_bytes(s.bytes_in)} / {format_bytes(s.bytes_out)}",
            )
        self._con.print(sessions)

        history = Table(title="Host History")
        history.add_column("Address", style="cyan")
        history.add_column("MAC")
        history.add_column("Status")
        history.add_column("Host")
        history.add_column("Last seen")
        for h in detail.history:
            history.add_row(
                h.ip_address or "",
                h.mac_address or "",
                h.status,
                h.host or "",
                h.last_seen or "",
            )
        self._con.print(history)

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    def log_entries(self, entries: list[LogEntry]) -> None:
        table = Table(title="Router Log")
        table.add_column("Time", style="dim")
        table.add_column("Topics", style="cyan")
        table.add_column("Message")
        for entry in entries:
            table.add_row(entry.time or "", ",".join(entry.topics), entry.message)
        self._con.print(table)

    # ------------------------------------------------------------------
    # Command result helpers
    # ------------------------------------------------------------------

    def command_result(self, success: bool, message: str = "") -> None:
        """Print a coloured OK / FAILED indicator."""
        text = "[green]OK[/green]" if success else "[red]FAILED[/red]"
        if message:
            text += f"  {message}"
        self._con.print(text)

    def error(self, message: str) -> None:
        """Print a bold red error line."""
        self._con.print(f"[bold red]Error:[/bold red] {message}")

    def info(self, message: str) -> None:
        """Print an informational message (plain)."""
        self._con.print(message)
