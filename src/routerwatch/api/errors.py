"""Exception hierarchy for router communication and administrative commands."""

from __future__ import annotations


class RouterError(Exception):
    """Base class for all router-related failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConnectError(RouterError):
    """The router is unreachable or rejected the credentials."""


class QueryError(RouterError):
    """A read command failed on an established session."""

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.command = command


class MutateError(RouterError):
    """The router rejected a write command.  Never retried automatically."""

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.command = command


class NotFoundError(RouterError):
    """The target of a query or command does not exist on the router."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} not found: {name}", status_code=404)
        self.kind = kind
        self.name = name


class ConfigError(RouterError):
    """Required configuration is missing or invalid."""
