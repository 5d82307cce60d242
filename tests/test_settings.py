import pytest
from sqlalchemy.engine import make_url

from todo_api.settings import build_database_url, get_settings

_ENV_VARS = [
    "DATABASE_URL",
    "DB_DRIVER",
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
    "DB_ECHO",
    "HOST",
    "PORT",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = get_settings()
    assert s.db_driver == "mysql+pymysql"
    assert s.db_host == "127.0.0.1"
    assert s.db_port == 3306
    assert s.db_name == "todos"
    assert s.port == 8080
    assert s.cors_allow_origins == ["*"]
    assert s.log_level == "INFO"
    assert s.db_echo is False


def test_database_url_from_parts(monkeypatch):
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_PORT", "3307")
    monkeypatch.setenv("DB_USER", "todo")
    monkeypatch.setenv("DB_PASSWORD", "p@ss:word")
    monkeypatch.setenv("DB_NAME", "todo_app")

    url = make_url(get_settings().database_url)
    assert url.drivername == "mysql+pymysql"
    assert url.host == "db.internal"
    assert url.port == 3307
    assert url.username == "todo"
    assert url.password == "p@ss:word"
    assert url.database == "todo_app"
    assert url.query == {"charset": "utf8mb4"}


def test_database_url_override(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./data/todos.db")
    monkeypatch.setenv("DB_HOST", "ignored")
    assert get_settings().database_url == "sqlite:///./data/todos.db"


def test_non_mysql_driver_has_no_charset():
    url = make_url(build_database_url("postgresql+psycopg", "localhost", 5432, "u", "p", "todos"))
    assert url.query == {}


@pytest.mark.parametrize("value", ["abc", "0", "70000"])
def test_invalid_port(monkeypatch, value):
    monkeypatch.setenv("DB_PORT", value)
    with pytest.raises(ValueError):
        get_settings()


def test_cors_origins_list(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.example, http://b.example,")
    assert get_settings().cors_allow_origins == ["http://a.example", "http://b.example"]
