"""
Tests for environment-driven settings.
"""

from app.core.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    """Tests for Settings and its cache."""

    def test_env_overrides(self, monkeypatch):
        """Test that environment variables are read through their aliases."""
        monkeypatch.setenv("INTEGRATIONS_OFFLINE_MODE", "false")
        monkeypatch.setenv("GLOFOX_ACCESS_TOKEN", "secret")
        monkeypatch.setenv("RISK_RECENT_WINDOW_DAYS", "14")

        settings = Settings()

        assert settings.integrations_offline_mode is False
        assert settings.glofox_access_token == "secret"
        assert settings.risk_recent_window_days == 14

    def test_async_database_url_uses_psycopg(self, monkeypatch):
        """Test that a plain postgres URL is switched to the async driver."""
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/gym")

        assert Settings().async_database_url == "postgresql+psycopg://u:p@db:5432/gym"

    def test_cors_origins_list(self):
        """Test comma-separated CORS origins."""
        settings = Settings(cors_origins="http://a.test, http://b.test")

        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_cache_cleared(self, monkeypatch):
        """Test that clearing the cache picks up new environment values."""
        clear_settings_cache()
        first = get_settings()
        monkeypatch.setenv("SAMPLE_DATA_SEED", "99")

        assert get_settings() is first

        clear_settings_cache()
        assert get_settings().sample_data_seed == 99
        clear_settings_cache()

    def test_engine_built_from_settings(self):
        """Test that the engine uses the async driver and pool settings."""
        from app.db.session import build_async_engine

        engine = build_async_engine(
            Settings(database_url="postgresql://u:p@db:5432/gym", database_pool_size=3)
        )

        assert engine.url.drivername == "postgresql+psycopg"
        assert engine.sync_engine.pool.size() == 3
