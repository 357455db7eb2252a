from services.admin_client.config import DEVELOPMENT_BASE_URL, PRODUCTION_BASE_URL, ClientConfig


def test_defaults_to_development_proxy(monkeypatch):
    for name in ("ADMIN_API_BASE_URL", "ADMIN_APP_ENV", "ADMIN_API_TIMEOUT", "ADMIN_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    config = ClientConfig.from_env()
    assert config.base_url == DEVELOPMENT_BASE_URL
    assert config.timeout == 30.0
    assert config.log_level == "WARNING"


def test_production_environment_selects_production_origin(monkeypatch):
    monkeypatch.delenv("ADMIN_API_BASE_URL", raising=False)
    monkeypatch.setenv("ADMIN_APP_ENV", "production")

    assert ClientConfig.from_env().base_url == PRODUCTION_BASE_URL


def test_explicit_base_url_wins(monkeypatch):
    monkeypatch.setenv("ADMIN_APP_ENV", "production")
    monkeypatch.setenv("ADMIN_API_BASE_URL", "https://staging.example.com/api/")
    monkeypatch.setenv("ADMIN_API_TIMEOUT", "12.5")
    monkeypatch.setenv("ADMIN_CREDENTIALS_FILE", "/tmp/admin-creds.json")

    config = ClientConfig.from_env()
    assert config.base_url == "https://staging.example.com/api"
    assert config.timeout == 12.5
    assert config.credentials_file == "/tmp/admin-creds.json"
