import pytest
from pydantic import ValidationError

from geoip_service.config import Settings
from geoip_service.logger import build_log_config, resolve_log_level

ENV_VARS = ("PORT", "GRPC_PORT", "GEOIP_DB_PATH", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _settings() -> Settings:
    return Settings()


def test_settings_defaults() -> None:
    settings = _settings()

    assert settings.PORT == 8080
    assert settings.GRPC_PORT == 9090
    assert settings.GEOIP_DB_PATH == "./GeoLite2-Country.mmdb"
    assert settings.LOG_LEVEL == "info"


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8000")
    monkeypatch.setenv("GRPC_PORT", "50051")
    monkeypatch.setenv("GEOIP_DB_PATH", "/data/GeoLite2-Country.mmdb")
    monkeypatch.setenv("LOG_LEVEL", "WARN")

    settings = _settings()

    assert settings.PORT == 8000
    assert settings.GRPC_PORT == 50051
    assert settings.GEOIP_DB_PATH == "/data/GeoLite2-Country.mmdb"
    assert settings.LOG_LEVEL == "warn"


def test_empty_values_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "")
    monkeypatch.setenv("GEOIP_DB_PATH", "")

    settings = _settings()

    assert settings.PORT == 8080
    assert settings.GEOIP_DB_PATH == "./GeoLite2-Country.mmdb"


def test_unknown_log_level_falls_back_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    assert _settings().LOG_LEVEL == "info"


@pytest.mark.parametrize("value", ["http", "70000", "-1"])
def test_invalid_port_is_rejected(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("PORT", value)

    with pytest.raises(ValidationError):
        _settings()


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", "DEBUG"), ("info", "INFO"), ("warn", "WARNING"), ("error", "ERROR"), ("trace", "INFO"), (None, "INFO")],
)
def test_resolve_log_level(level: str | None, expected: str) -> None:
    assert resolve_log_level(level) == expected


def test_log_config_applies_level_to_app_and_uvicorn() -> None:
    log_config = build_log_config("debug")

    assert log_config["loggers"]["geoip_service"]["level"] == "DEBUG"
    assert log_config["loggers"]["uvicorn"]["level"] == "DEBUG"


def test_dotenv_file_in_working_directory_is_ignored(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Configuration comes from the process environment only."""
    (tmp_path / ".env").write_text("PORT=1234\nGEOIP_DB_PATH=/tmp/other.mmdb\n")
    monkeypatch.chdir(tmp_path)

    settings = _settings()

    assert settings.PORT == 8080
    assert settings.GEOIP_DB_PATH == "./GeoLite2-Country.mmdb"
