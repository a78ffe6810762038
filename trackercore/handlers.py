"""HTTP endpoints for managing currencies and looking up prices."""

from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class _InvalidRequest(ValueError):
    """The request body does not match what the endpoint expects."""


def _bind(**fields):
    """Read the JSON body and return the named fields, each required and non-empty."""
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise _InvalidRequest("request body must be a JSON object")
    values = {}
    for name, kind in fields.items():
        value = data.get(name)
        if value is None:
            raise _InvalidRequest(f"field '{name}' is required")
        if kind is int:
            if not isinstance(value, int) or isinstance(value, bool):
                raise _InvalidRequest(f"field '{name}' must be an integer")
            if not _INT64_MIN <= value <= _INT64_MAX:
                raise _InvalidRequest(f"field '{name}' is out of range")
        elif not isinstance(value, kind):
            raise _InvalidRequest(f"field '{name}' must be a string")
        if not value:
            raise _InvalidRequest(f"field '{name}' is required")
        values[name] = value
    return values


def create_blueprint(currency_service, price_service):
    """Return the ``/currency`` blueprint backed by the given services."""
    blueprint = Blueprint("currency", __name__, url_prefix="/currency")

    @blueprint.errorhandler(_InvalidRequest)
    def _invalid(exc):
        return jsonify(error="Invalid data format", details=str(exc)), 400

    @blueprint.post("/add")
    def add_currency():
        body = _bind(symbol=str, name=str)
        try:
            currency_service.add_currency(body["symbol"], body["name"])
        except Exception as exc:
            return jsonify(error="Failed to add currency", details=str(exc)), 500
        return jsonify(
            message="Currency successfully added",
            symbol=body["symbol"],
            name=body["name"],
        )

    @blueprint.delete("/remove")
    def remove_currency():
        body = _bind(symbol=str)
        try:
            currency_service.remove_currency(body["symbol"])
        except Exception as exc:
            return jsonify(error="Failed to remove currency", details=str(exc)), 500
        return jsonify(message="Currency successfully removed", symbol=body["symbol"])

    @blueprint.get("/price")
    def get_price():
        body = _bind(coin=str, timestamp=int)
        try:
            moment = datetime.fromtimestamp(body["timestamp"], timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise _InvalidRequest(f"field 'timestamp' is out of range: {exc}") from exc
        try:
            price = price_service.get_price_at_time(body["coin"], moment)
        except Exception:
            return jsonify(error="Price not found", coin=body["coin"], time=moment.isoformat())
        return jsonify(price.to_dict())

    @blueprint.get("/list")
    def list_currencies():
        try:
            currencies = currency_service.get_active_currencies()
        except Exception as exc:
            return jsonify(error="Failed to get currency list", details=str(exc)), 500
        return jsonify([currency.to_dict() for currency in currencies])

    return blueprint