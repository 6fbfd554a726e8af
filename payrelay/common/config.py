"""Environment-driven settings for the relay process.

Loaded once at import time. Values come from environment variables or a local
`.env` file (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class RelaySettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-relay"
    log_level: str = "INFO"
    port: int = 3000
    # Optional so a missing credential surfaces as AuthConfigError on first use.
    paypal_client_id: str | None = None
    paypal_secret: str | None = None
    paypal_base_url: str = "https://api-m.sandbox.paypal.com"
    return_url: str = "http://localhost:3000/return"
    cancel_url: str = "http://localhost:3000/cancel"
    upstream_timeout_seconds: float | None = None
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = RelaySettings()
