import pytest
from pydantic import ValidationError

from fileflow.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_status_store_backend(self) -> None:
        s = Settings()
        assert s.status_store_backend == "postgres"

    def test_default_max_workers(self) -> None:
        s = Settings()
        assert s.max_workers == 5

    def test_default_worker_safety_timeout(self) -> None:
        s = Settings()
        assert s.worker_safety_timeout_seconds == 300

    def test_default_max_event_attempts(self) -> None:
        s = Settings()
        assert s.max_event_attempts == 3

    def test_default_light_processing_delay(self) -> None:
        s = Settings()
        assert s.light_processing_delay_seconds == 2.0

    def test_default_adapters(self) -> None:
        s = Settings()
        assert s.worker_provisioner == "example"
        assert s.notifier == "log"


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_max_workers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_WORKERS", "12")
        s = Settings()
        assert s.max_workers == 12

    def test_loads_light_budget(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LIGHT_PROCESSING_BUDGET_SECONDS", "2.5")
        s = Settings()
        assert s.light_processing_budget_seconds == 2.5


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_max_workers_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_WORKERS", "abc")
        with pytest.raises(ValidationError):
            Settings()
