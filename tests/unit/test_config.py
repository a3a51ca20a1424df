"""
Unit Tests - Configuration and Logging
"""
import logging

import pytest
from pydantic import ValidationError

from marketplace_analytics.config import AnalyticsSettings, Settings
from marketplace_analytics.config.logging import configure_logging
from marketplace_analytics.config.settings import DatabaseSettings, LoggingSettings


class TestSettings:
    """Tests for the settings sections"""

    def test_analytics_defaults(self):
        settings = AnalyticsSettings()

        assert settings.trend_window_months == 6
        assert settings.baseline_days == 30
        assert settings.top_entities_limit == 10
        assert settings.activity_slice_size == 5
        assert settings.activity_feed_cap == 8
        assert settings.uncategorized_label == "Uncategorized"

    def test_analytics_from_environment(self, monkeypatch):
        monkeypatch.setenv("ANALYTICS_TREND_WINDOW_MONTHS", "12")
        monkeypatch.setenv("ANALYTICS_ACTIVITY_FEED_CAP", "3")

        settings = AnalyticsSettings()

        assert settings.trend_window_months == 12
        assert settings.activity_feed_cap == 3

    @pytest.mark.parametrize("field", ["baseline_days", "activity_feed_cap", "activity_slice_size"])
    def test_negative_sizes_rejected(self, field):
        with pytest.raises(ValidationError):
            AnalyticsSettings(**{field: -1})

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            AnalyticsSettings(read_timeout_seconds=0)

    def test_database_url_override(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert DatabaseSettings(host="db", port=5433).async_url.startswith("postgresql+asyncpg://")
        assert DatabaseSettings(host="db", port=5433).async_url.endswith("@db:5433/marketplace")

        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./local.db")
        assert DatabaseSettings().async_url == "sqlite+aiosqlite:///./local.db"

    def test_environment_validated(self, test_settings):
        assert test_settings.app_env == "testing"
        assert not test_settings.is_development

        with pytest.raises(ValidationError):
            Settings(app_env="moon")

    def test_log_format_validated(self):
        assert LoggingSettings(format="TEXT").format == "text"

        with pytest.raises(ValidationError):
            LoggingSettings(format="xml")


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    """Tests for configure_logging"""

    def test_single_root_handler(self):
        configure_logging("DEBUG", "text")
        configure_logging("WARNING", "json")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_uvicorn_routed_through_root(self):
        configure_logging("INFO")

        uvicorn_logger = logging.getLogger("uvicorn.access")
        assert uvicorn_logger.handlers == []
        assert uvicorn_logger.propagate
