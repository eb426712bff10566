"""Settings parsing tests."""

import pytest

from linker.config import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.CACHE_MAX_CAPACITY == 1000
    assert settings.CREATE_MAX_RETRIES == 2


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("CACHE_MAX_CAPACITY", "42")
    monkeypatch.setenv("LISTEN_ADDR", "127.0.0.1:9000")
    settings = Settings()
    assert settings.CACHE_MAX_CAPACITY == 42
    assert settings.listen_host == "127.0.0.1"
    assert settings.listen_port == 9000


@pytest.mark.parametrize(
    ("addr", "host", "port"),
    [
        ("0.0.0.0:8080", "0.0.0.0", 8080),
        ("[::1]:8081", "::1", 8081),
        (":8082", "0.0.0.0", 8082),
    ],
)
def test_listen_addr_split(addr: str, host: str, port: int) -> None:
    settings = Settings(LISTEN_ADDR=addr)
    assert settings.listen_host == host
    assert settings.listen_port == port


def test_masked_database_url_hides_password() -> None:
    settings = Settings(DATABASE_URL="postgresql+asyncpg://linker:hunter2@db:5432/linker")
    assert "hunter2" not in settings.masked_database_url
    assert "db:5432/linker" in settings.masked_database_url
