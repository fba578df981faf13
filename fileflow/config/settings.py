from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    status_store_backend: str = "postgres"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "fileflow"
    db_username: str = "fileflow"
    db_password: str = "secret"

    max_workers: int = 5
    worker_safety_timeout_seconds: int = 300

    worker_provisioner: str = "example"
    provisioner_base_url: str = ""
    provisioner_api_token: str = ""
    provisioner_launch_template: str = ""
    provisioner_timeout_seconds: int = 30

    light_processing_delay_seconds: float = 2.0
    light_processing_budget_seconds: float = 10.0

    notifier: str = "log"
    notification_webhook_url: str = ""
    notification_timeout_seconds: int = 10

    event_batch_size: int = 10
    event_poll_interval_seconds: int = 5
    event_visibility_timeout_seconds: int = 60
    max_event_attempts: int = 3
    max_concurrent_events: int = 4

    reconcile_interval_seconds: int = 60
    processing_stale_after_seconds: int = 900
