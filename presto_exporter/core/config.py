from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Presto
    presto_http_url: str = ""  # required at startup, e.g. http://coordinator:8080
    http_timeout_seconds: float = Field(5.0, gt=0)

    # Exposition
    port: int = Field(9988, ge=1, le=65535)
    metrics_namespace: str | None = None

    # Poll loops
    cluster_poll_interval_seconds: float = Field(10.0, ge=0)
    query_poll_interval_seconds: float = Field(60.0, ge=0)
    # Lookback for completed queries; None ties it to the query poll interval
    query_window_seconds: float | None = Field(None, ge=0)
    query_dedup_enabled: bool = False
    query_histogram_buckets: list[float] | None = None

    # Failure backoff; off keeps the fixed interval after a failed cycle
    poll_backoff_enabled: bool = False
    poll_backoff_max_seconds: float = Field(60.0, ge=0)
    poll_backoff_jitter: float = Field(0.1, ge=0)

    # Logging
    app_log_level: str = "info"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]

    otel_service_name: str = "presto_exporter"
    app_environment: str = "production"

    @property
    def effective_query_window(self) -> float:
        if self.query_window_seconds is None:
            return self.query_poll_interval_seconds
        return self.query_window_seconds
