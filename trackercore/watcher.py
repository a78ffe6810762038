"""Background polling of exchange prices for every active currency."""

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone

import requests

log = logging.getLogger(__name__)

KUCOIN_LEVEL1_ENDPOINT = "https://api.kucoin.com/api/v1/market/orderbook/level1"
KUCOIN_SUCCESS_CODE = "200000"
QUOTE_CURRENCY = "USDT"
DEFAULT_UPDATE_INTERVAL = 10.0
REQUEST_TIMEOUT = 10.0


class PriceFetchError(RuntimeError):
    """Raised when a price cannot be obtained from the exchange."""


def kucoin_url(symbol):
    """Return the level-1 order book URL for ``symbol`` quoted in USDT."""
    return f"{KUCOIN_LEVEL1_ENDPOINT}?symbol={symbol.upper()}-{QUOTE_CURRENCY}"


def parse_kucoin_response(payload):
    """Extract the price from an order book response (a mapping or raw JSON)."""
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise PriceFetchError(f"invalid response body: {exc}") from exc
    if not isinstance(payload, dict):
        raise PriceFetchError("response body must be a JSON object")

    code = payload.get("code", "")
    if not isinstance(code, str):
        raise PriceFetchError("response code must be a string")
    if code != KUCOIN_SUCCESS_CODE:
        raise PriceFetchError(f"API returned error: {code}")

    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise PriceFetchError("response data must be a JSON object")
    raw = data.get("price") or ""
    if not isinstance(raw, str):
        raise PriceFetchError("price parsing error: price must be a string")
    if raw != raw.strip() or "_" in raw:
        raise PriceFetchError(f"price parsing error: invalid syntax {raw!r}")
    try:
        return float(raw)
    except ValueError as exc:
        raise PriceFetchError(f"price parsing error: {exc}") from exc


class Watcher:
    """Periodically fetches and stores the price of each active currency."""

    def __init__(self, currency_service, price_service, update_interval=DEFAULT_UPDATE_INTERVAL):
        self._currency_service = currency_service
        self._price_service = price_service
        self.update_interval = update_interval
        self._stop_event = threading.Event()
        self._thread = None

    def start(self):
        """Begin polling in a background thread; the first update follows one interval."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("watcher is already running")
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name="price-watcher", daemon=True)
        self._thread.start()
        log.info("Crypto watcher started")

    def stop(self):
        """Stop polling and wait for the background thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        log.info("Crypto watcher stopped")

    def _run(self):
        while not self._stop_event.wait(self.update_interval):
            self.update_prices()

    def update_prices(self):
        """Update every active currency concurrently and return the errors met."""
        try:
            currencies = self._currency_service.get_active_currencies()
        except Exception as exc:
            log.error("Error getting active currencies: %s", exc)
            return [exc]
        if not currencies:
            return []

        errors = []
        with ThreadPoolExecutor(max_workers=len(currencies)) as pool:
            futures = [pool.submit(self.update_currency_price, c) for c in currencies]
            for future in as_completed(futures):
                exc = future.exception()
                if exc is not None:
                    log.error("Price update error: %s", exc)
                    errors.append(exc)
        return errors

    def update_currency_price(self, currency):
        """Fetch and store the current price of ``currency``; return the stored record."""
        try:
            price = self.fetch_price(currency.symbol)
        except PriceFetchError as exc:
            raise PriceFetchError(f"failed to get price for {currency.symbol}: {exc}") from exc
        try:
            record = self._price_service.save_price(
                currency.id, price, datetime.now(timezone.utc)
            )
        except Exception as exc:
            raise RuntimeError(f"failed to save price for {currency.symbol}: {exc}") from exc
        log.info("Updated price %s: %.8f", currency.symbol, price)
        return record

    def fetch_price(self, symbol):
        """Return the current USDT price of ``symbol`` from the exchange."""
        try:
            response = requests.get(kucoin_url(symbol), timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise PriceFetchError(str(exc)) from exc
        if response.status_code != 200:
            raise PriceFetchError(f"API returned status {response.status_code}")
        return parse_kucoin_response(response.content)