"""Operations on the set of tracked currencies."""

from datetime import datetime, timezone

from sqlalchemy import select, update

from .models import Currency, NotFoundError


class CurrencyService:
    """Adds, deactivates and looks up tracked currencies."""

    def __init__(self, database):
        self._database = database

    def add_currency(self, symbol, name):
        """Track ``symbol``; an existing entry is reactivated and keeps its name."""
        with self._database.session() as session:
            currency = session.scalars(
                select(Currency).where(Currency.symbol == symbol)
            ).one_or_none()
            if currency is None:
                currency = Currency(symbol=symbol, name=name, is_active=True)
                session.add(currency)
            else:
                currency.is_active = True
                currency.updated_at = datetime.now(timezone.utc)
            session.flush()
        return currency

    def remove_currency(self, symbol):
        """Mark ``symbol`` inactive; unknown symbols are ignored."""
        with self._database.session() as session:
            session.execute(
                update(Currency)
                .where(Currency.symbol == symbol)
                .values(is_active=False, updated_at=datetime.now(timezone.utc))
            )

    def get_active_currencies(self):
        """Return the active currencies ordered by symbol."""
        with self._database.session() as session:
            return list(
                session.scalars(
                    select(Currency)
                    .where(Currency.is_active.is_(True))
                    .order_by(Currency.symbol.asc())
                )
            )

    def get_currency_by_symbol(self, symbol):
        """Return the currency with ``symbol``, active or not."""
        with self._database.session() as session:
            currency = session.scalars(
                select(Currency).where(Currency.symbol == symbol)
            ).one_or_none()
        if currency is None:
            raise NotFoundError(f"currency {symbol!r} not found")
        return currency

    def get_currency_by_id(self, currency_id):
        """Return the currency with primary key ``currency_id``."""
        with self._database.session() as session:
            currency = session.get(Currency, currency_id)
        if currency is None:
            raise NotFoundError(f"currency with id {currency_id} not found")
        return currency