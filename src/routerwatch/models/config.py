from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application-wide settings populated from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ROUTERWATCH_",
        extra="ignore",
    )

    router_host: str | None = None
    router_user: str = "admin"
    router_password: str = ""
    router_port: int | None = None
    router_tls: bool = False
    router_verify_tls: bool = True

    poll_interval: float = 3.0
    query_timeout: float = 5.0
    max_concurrency: int = 4

    http_host: str = "0.0.0.0"
    http_port: int = 3000
    stream_host: str = "0.0.0.0"
    stream_port: int = 9090
    subscriber_queue_size: int = 8

    @property
    def base_url(self) -> str:
        """Root URL of the router's REST API (``.../rest``)."""
        if not self.router_host:
            from routerwatch.api.errors import ConfigError

            raise ConfigError(
                "Router host is not configured. "
                "Set ROUTERWATCH_ROUTER_HOST or pass --host."
            )
        scheme = "https" if self.router_tls else "http"
        netloc = self.router_host
        if self.router_port is not None:
            netloc = f"{netloc}:{self.router_port}"
        return f"{scheme}://{netloc}/rest"
