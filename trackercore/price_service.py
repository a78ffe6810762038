"""Recording and querying currency prices."""

from datetime import datetime, timezone

from sqlalchemy import select

from .models import Currency, NotFoundError, Price


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


_NEWEST_FIRST = (Price.timestamp.desc(), Price.id.desc())


class PriceService:
    """Stores price observations and answers lookups over them."""

    def __init__(self, database):
        self._database = database

    def _by_symbol(self, symbol):
        return select(Price).join(Price.currency).where(Currency.symbol == symbol)

    def _first(self, query, symbol):
        with self._database.session() as session:
            price = session.scalars(query.limit(1)).first()
        if price is None:
            raise NotFoundError(f"no price recorded for {symbol!r}")
        return price

    def save_price(self, currency_id, price, timestamp):
        """Record ``price`` for ``currency_id`` at ``timestamp`` and return it."""
        record = Price(currency_id=currency_id, price=float(price), timestamp=_as_utc(timestamp))
        with self._database.session() as session:
            session.add(record)
            session.flush()
        return record

    def get_price_at_time(self, symbol, timestamp):
        """Return the price of ``symbol`` recorded closest to ``timestamp``."""
        target = _as_utc(timestamp)
        query = self._by_symbol(symbol)
        with self._database.session() as session:
            candidates = [
                session.scalars(q.limit(1)).first()
                for q in (
                    query.where(Price.timestamp <= target).order_by(*_NEWEST_FIRST),
                    query.where(Price.timestamp >= target).order_by(Price.timestamp, Price.id),
                )
            ]
        candidates = [p for p in candidates if p is not None]
        if not candidates:
            raise NotFoundError(f"no price recorded for {symbol!r}")
        return min(candidates, key=lambda p: abs((p.timestamp - target).total_seconds()))

    def get_latest_price(self, symbol):
        """Return the most recent price of ``symbol``."""
        return self._first(self._by_symbol(symbol).order_by(*_NEWEST_FIRST), symbol)

    def get_price_history(self, symbol, limit):
        """Return up to ``limit`` prices of ``symbol``, newest first; 0 means all."""
        if limit < 0:
            raise ValueError("limit must not be negative")
        query = self._by_symbol(symbol).order_by(*_NEWEST_FIRST)
        if limit:
            query = query.limit(limit)
        with self._database.session() as session:
            return list(session.scalars(query))

    def get_prices_by_currency_id(self, currency_id):
        """Return all prices of ``currency_id``, newest first."""
        query = select(Price).where(Price.currency_id == currency_id).order_by(*_NEWEST_FIRST)
        with self._database.session() as session:
            return list(session.scalars(query))