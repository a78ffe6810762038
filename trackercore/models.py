"""ORM models for tracked currencies and their recorded prices."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class NotFoundError(LookupError):
    """Raised when a requested record does not exist."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _UTCDateTime(TypeDecorator):
    """Stores naive UTC datetimes; returns them aware. Naive input is taken as UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


def _columns(record) -> Dict[str, Any]:
    data = {}
    for column in record.__table__.columns:
        value = getattr(record, column.key)
        data[column.key] = value.isoformat() if isinstance(value, datetime) else value
    return data


class Base(DeclarativeBase):
    """Declarative base for all tables of the tracker."""


class Currency(Base):
    """A currency whose price is tracked."""

    __tablename__ = "currencies"
    __table_args__ = (Index("idx_currencies_active", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    symbol: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(_UTCDateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(_UTCDateTime, default=_utc_now)

    prices: Mapped[List["Price"]] = relationship(
        back_populates="currency",
        primaryjoin="Currency.id == foreign(Price.currency_id)",
        order_by="Price.timestamp",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping; prices appear only when loaded and non-empty."""
        data = _columns(self)
        if "prices" not in inspect(self).unloaded and self.prices:
            data["prices"] = [_columns(price) for price in self.prices]
        return data


class Price(Base):
    """A price observation for a currency at a point in time."""

    __tablename__ = "prices"
    __table_args__ = (Index("idx_prices_currency_timestamp", "currency_id", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    currency_id: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(_UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(_UTCDateTime, default=_utc_now)

    currency: Mapped[Optional[Currency]] = relationship(
        back_populates="prices",
        primaryjoin="Currency.id == foreign(Price.currency_id)",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping; the currency appears only when loaded."""
        data = _columns(self)
        if "currency" not in inspect(self).unloaded and self.currency is not None:
            data["currency"] = _columns(self.currency)
        return data