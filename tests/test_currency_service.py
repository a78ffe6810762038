import pytest

from trackercore.currency_service import CurrencyService
from trackercore.database import DatabaseService
from trackercore.models import NotFoundError


@pytest.fixture
def service():
    db = DatabaseService("sqlite://")
    db.create_tables()
    yield CurrencyService(db)
    db.close()


def test_add_and_list(service):
    service.add_currency("BTC", "Bitcoin")
    active = service.get_active_currencies()
    assert [(c.symbol, c.name, c.is_active) for c in active] == [("BTC", "Bitcoin", True)]


def test_add_returns_persisted_currency(service):
    currency = service.add_currency("BTC", "Bitcoin")
    assert service.get_currency_by_id(currency.id).symbol == "BTC"


def test_active_currencies_sorted_by_symbol(service):
    for symbol, name in [("SOL", "Solana"), ("BTC", "Bitcoin"), ("ETH", "Ethereum")]:
        service.add_currency(symbol, name)
    assert [c.symbol for c in service.get_active_currencies()] == ["BTC", "ETH", "SOL"]


def test_add_twice_keeps_single_entry_and_first_name(service):
    service.add_currency("BTC", "Bitcoin")
    service.add_currency("BTC", "Other Name")
    active = service.get_active_currencies()
    assert len(active) == 1
    assert active[0].name == "Bitcoin"


def test_remove_deactivates(service):
    service.add_currency("BTC", "Bitcoin")
    service.add_currency("ETH", "Ethereum")
    service.remove_currency("BTC")
    assert [c.symbol for c in service.get_active_currencies()] == ["ETH"]
    assert service.get_currency_by_symbol("BTC").is_active is False


def test_remove_updates_timestamp(service):
    added = service.add_currency("BTC", "Bitcoin")
    service.remove_currency("BTC")
    removed = service.get_currency_by_symbol("BTC")
    assert removed.updated_at >= added.updated_at


def test_readd_reactivates(service):
    original = service.add_currency("BTC", "Bitcoin")
    service.remove_currency("BTC")
    service.add_currency("BTC", "Bitcoin")
    current = service.get_currency_by_symbol("BTC")
    assert current.is_active is True
    assert current.id == original.id


def test_remove_unknown_symbol_is_ignored(service):
    service.add_currency("BTC", "Bitcoin")
    service.remove_currency("DOGE")
    assert [c.symbol for c in service.get_active_currencies()] == ["BTC"]


def test_get_by_symbol_missing_raises(service):
    with pytest.raises(NotFoundError):
        service.get_currency_by_symbol("NOPE")


def test_get_by_id_missing_raises(service):
    with pytest.raises(NotFoundError):
        service.get_currency_by_id(12345)


def test_empty_list_when_nothing_tracked(service):
    assert service.get_active_currencies() == []