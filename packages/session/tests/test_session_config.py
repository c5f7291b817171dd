"""Tests for the configuration system."""

import pytest
import structlog

from cashflow_session.config import CashflowConfig, PersistenceConfig, configure_logging


class TestPersistenceConfig:
    """Test suite for PersistenceConfig."""

    def test_default_values(self):
        """PersistenceConfig should have sensible defaults."""
        config = PersistenceConfig()

        assert config.save_debounce_seconds == 0.6

    def test_debounce_validation(self):
        """Debounce should be between 0 and 60 seconds."""
        PersistenceConfig(save_debounce_seconds=0.0)
        PersistenceConfig(save_debounce_seconds=60.0)

        with pytest.raises(ValueError):
            PersistenceConfig(save_debounce_seconds=-0.1)

        with pytest.raises(ValueError):
            PersistenceConfig(save_debounce_seconds=61.0)

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CASHFLOW_PERSISTENCE_SAVE_DEBOUNCE_SECONDS", "1.5")
        config = PersistenceConfig()

        assert config.save_debounce_seconds == 1.5

    def test_retired_settings_ignored(self, monkeypatch: pytest.MonkeyPatch):
        """An old .env naming a table still loads."""
        monkeypatch.setenv("CASHFLOW_PERSISTENCE_TABLE_NAME", "cashflow_states")
        config = PersistenceConfig()

        assert "table_name" not in config.model_dump()
        assert set(PersistenceConfig.model_fields) == {"save_debounce_seconds"}


class TestCashflowConfig:
    """Test suite for CashflowConfig."""

    def test_default_values(self):
        config = CashflowConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.default_month == "2026-01"
        assert config.month_options_year == 2026
        assert isinstance(config.persistence, PersistenceConfig)
        assert config.is_production is False
        assert config.is_debug is False

    def test_env_normalized(self):
        config = CashflowConfig(env=" Production ")

        assert config.env == "production"
        assert config.is_production is True

    def test_invalid_env(self):
        with pytest.raises(ValueError, match="Invalid environment"):
            CashflowConfig(env="qa")

    def test_log_level_normalized(self):
        config = CashflowConfig(log_level="debug")

        assert config.log_level == "DEBUG"
        assert config.is_debug is True

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            CashflowConfig(log_level="chatty")

    def test_default_month_validated(self):
        assert CashflowConfig(default_month=" 2026-07 ").default_month == "2026-07"

        with pytest.raises(ValueError):
            CashflowConfig(default_month="July")

    def test_environment_variables(self, monkeypatch: pytest.MonkeyPatch):
        """Settings should load from CASHFLOW_ prefixed variables."""
        monkeypatch.setenv("CASHFLOW_ENV", "staging")
        monkeypatch.setenv("CASHFLOW_DEFAULT_MONTH", "2026-03")
        monkeypatch.setenv("CASHFLOW_MONTH_OPTIONS_YEAR", "2027")
        config = CashflowConfig()

        assert config.env == "staging"
        assert config.default_month == "2026-03"
        assert config.month_options_year == 2027


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    @pytest.mark.parametrize("env", ["development", "production"])
    def test_configures_structlog(self, env):
        configure_logging(CashflowConfig(env=env, log_level="WARNING"))

        assert structlog.is_configured()
        structlog.get_logger().info("suppressed_below_warning")
