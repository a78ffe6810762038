import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.engine import make_url

from trackercore.database import DatabaseService, build_database_url, get_env
from trackercore.models import Currency

DB_VARS = ("DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME")


@pytest.fixture
def db():
    service = DatabaseService("sqlite://")
    service.create_tables()
    yield service
    service.close()


@pytest.fixture
def clean_env(monkeypatch):
    for var in DB_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_get_env_returns_value(monkeypatch):
    monkeypatch.setenv("TRACKER_SAMPLE", "value")
    assert get_env("TRACKER_SAMPLE", "fallback") == "value"


def test_get_env_falls_back_when_unset(monkeypatch):
    monkeypatch.delenv("TRACKER_SAMPLE", raising=False)
    assert get_env("TRACKER_SAMPLE", "fallback") == "fallback"


def test_get_env_falls_back_when_empty(monkeypatch):
    monkeypatch.setenv("TRACKER_SAMPLE", "")
    assert get_env("TRACKER_SAMPLE", "fallback") == "fallback"


def test_build_database_url_defaults(clean_env):
    url = make_url(build_database_url("crypto_tracker"))
    assert url.drivername == "postgresql"
    assert url.host == "localhost"
    assert url.port == 5432
    assert url.username == "postgres"
    assert url.password == "password"
    assert url.database == "crypto_tracker"
    assert dict(url.query) == {"sslmode": "disable"}


def test_build_database_url_from_env(clean_env):
    clean_env.setenv("DB_HOST", "db.example.com")
    clean_env.setenv("DB_PORT", "6543")
    clean_env.setenv("DB_USER", "user")
    clean_env.setenv("DB_PASSWORD", "secret")
    url = make_url(build_database_url("prices"))
    assert url.host == "db.example.com"
    assert url.port == 6543
    assert url.username == "user"
    assert url.password == "secret"
    assert url.database == "prices"


def test_build_database_url_rejects_bad_port(clean_env):
    clean_env.setenv("DB_PORT", "not-a-port")
    with pytest.raises(ValueError):
        build_database_url("crypto_tracker")


def test_create_tables_creates_tables_and_indexes(db):
    inspector = inspect(db.engine)
    assert {"currencies", "prices"} <= set(inspector.get_table_names())
    price_indexes = {ix["name"] for ix in inspector.get_indexes("prices")}
    currency_indexes = {ix["name"] for ix in inspector.get_indexes("currencies")}
    assert "idx_prices_currency_timestamp" in price_indexes
    assert "idx_currencies_active" in currency_indexes


def test_create_tables_is_idempotent(db):
    db.create_tables()
    assert {"currencies", "prices"} <= set(inspect(db.engine).get_table_names())


def test_session_commits(db):
    with db.session() as s:
        s.add(Currency(symbol="ETH", name="Ethereum"))
    with db.session() as s:
        assert s.scalars(select(Currency.symbol)).all() == ["ETH"]


def test_session_rolls_back_on_error(db):
    with pytest.raises(KeyError):
        with db.session() as s:
            s.add(Currency(symbol="ETH", name="Ethereum"))
            s.flush()
            raise KeyError("boom")
    with db.session() as s:
        assert s.scalar(select(func.count()).select_from(Currency)) == 0


def test_connection_failure_raises(tmp_path):
    bad = tmp_path / "missing" / "deeper" / "db.sqlite"
    with pytest.raises(RuntimeError, match="database connection failed"):
        DatabaseService(f"sqlite:///{bad}")


def test_from_env_uses_database_url(monkeypatch, tmp_path):
    path = tmp_path / "tracker.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{path}")
    with DatabaseService.from_env() as service:
        service.create_tables()
        with service.session() as s:
            s.add(Currency(symbol="BTC", name="Bitcoin"))
    with DatabaseService(f"sqlite:///{path}") as again:
        with again.session() as s:
            assert s.scalars(select(Currency.name)).all() == ["Bitcoin"]