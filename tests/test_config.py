"""Tests for environment-based settings."""

import pytest
from pydantic import ValidationError

from orders_api.config import Settings
from orders_api.observability import TelemetryConfig


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("OTEL_EXPORTER_OTLP_ENDPOINT", "OTEL_SERVICE_NAME", "PORT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.otel_exporter_otlp_endpoint == "http://localhost:4318"
        assert settings.otel_service_name == "orders-api"
        assert settings.port == 3000
        assert settings.metric_export_interval_ms == 10000
        assert settings.prometheus_enabled is False

    def test_reads_standard_otel_variables(self, monkeypatch):
        monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4318/")
        monkeypatch.setenv("OTEL_SERVICE_NAME", "orders-staging")
        monkeypatch.setenv("PORT", "8080")

        settings = Settings(_env_file=None)

        assert settings.otel_exporter_otlp_endpoint == "http://collector:4318"
        assert settings.otel_service_name == "orders-staging"
        assert settings.port == 8080

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_allowed_origins_list(self):
        settings = Settings(_env_file=None, allowed_origins="http://a.test, http://b.test")

        assert settings.get_allowed_origins_list() == ["http://a.test", "http://b.test"]

    def test_telemetry_config_from_settings(self):
        settings = Settings(
            _env_file=None,
            otel_exporter_otlp_endpoint="http://collector:4318",
            otel_service_name="orders-x",
            environment="staging",
            metric_export_interval_ms=5000,
        )

        config = TelemetryConfig.from_settings(settings)

        assert config.collector_endpoint == "http://collector:4318"
        assert config.service_name == "orders-x"
        assert config.deployment_environment == "staging"
        assert config.metric_export_interval_ms == 5000
        assert "fastapi" in config.instrumentations
