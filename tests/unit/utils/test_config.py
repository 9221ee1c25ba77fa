from src.utils.config import Settings


def test_settings_defaults_local_env_and_version(monkeypatch):
    # Clear env to test defaults
    for name in ("APP_ENV", "APP_VERSION", "STORE_BACKEND", "DETACHED_DRAIN_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)

    # Create a fresh instance (bypass cache)
    s = Settings()
    assert s.app_env == "local"
    assert s.app_version == "0.1.0"
    assert s.store_backend == "sql"
    assert s.detached_drain_timeout_s == 5.0


def test_settings_respects_env_vars(monkeypatch):
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("APP_VERSION", "9.9.9")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("DETACHED_DRAIN_TIMEOUT_S", "0.5")

    # Bypass cache by constructing directly
    s = Settings()
    assert s.app_env == "dev"
    assert s.app_version == "9.9.9"
    assert s.store_backend == "memory"
    assert s.detached_drain_timeout_s == 0.5
