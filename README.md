# trackercore

A small service that keeps track of cryptocurrency prices. You give it a list
of coins. For each active coin it polls the KuCoin level-1 order book against
USDT every 10 seconds and stores the price in a database. An HTTP API lets you
manage the list and look up a coin's price at any moment.

## Installation

```
pip install .
```

The `trackercore` command connects to PostgreSQL. You need a driver that
SQLAlchemy can use for it, such as `psycopg2`. This driver is not installed
with the package.

## Running

```
trackercore
```

Settings come from the environment. If there is a `.env` file in the working
directory, it is read first.

| Variable       | Default          |
|----------------|------------------|
| `DATABASE_URL` | (unset)          |
| `DB_HOST`      | `localhost`      |
| `DB_PORT`      | `5432`           |
| `DB_USER`      | `postgres`       |
| `DB_PASSWORD`  | `password`       |
| `DB_NAME`      | `crypto_tracker` |
| `PORT`         | `8080`           |

- If `DATABASE_URL` is set, it is used as it is. It can be any SQLAlchemy URL.
- If it is not set, a PostgreSQL URL is built from the `DB_*` variables. The
  database `DB_NAME` is created if it does not exist yet.

Next, the service creates the `currencies` and `prices` tables and their
indexes, then starts the price watcher. Last, it serves HTTP on `0.0.0.0:PORT`.
When the server stops, the watcher stops too. The command exits with status 1
if any of these steps fails: connecting, creating the tables, or starting the
server.

## HTTP API

Every response carries permissive CORS headers. An `OPTIONS` request gets
`204 No Content`.

- `POST /currency/add` with body `{"symbol": "BTC", "name": "Bitcoin"}` adds a
  coin. If the symbol is already known, the coin becomes active again and keeps
  its old name.
- `DELETE /currency/remove` with body `{"symbol": "BTC"}` marks a coin as
  inactive. Its price history is kept. Unknown symbols are ignored.
- `GET /currency/price` with JSON body `{"coin": "BTC", "timestamp": 1700000000}`
  returns the stored price closest to that Unix time (in seconds). If no price
  is found, the status is still `200`, and the body is
  `{"error": "Price not found", "coin": ..., "time": ...}`.
- `GET /currency/list` returns the active coins, sorted by symbol.
- `GET /health` returns `{"status": "ok", "timestamp": ...}`.

A request whose body is malformed or incomplete gets `400`, with `error` and
`details` fields. A required field that is missing, empty or of the wrong type
counts as incomplete. If a service call fails while adding, removing or
listing, the response is `500`, with `error` and `details` fields.

## Using it as a library

```python
from trackercore.database import DatabaseService
from trackercore.currency_service import CurrencyService
from trackercore.price_service import PriceService
from trackercore.watcher import Watcher
from trackercore.app import create_app

database = DatabaseService("sqlite:///tracker.db")
database.create_tables()

currencies = CurrencyService(database)
prices = PriceService(database)

currencies.add_currency("ETH", "Ethereum")

watcher = Watcher(currencies, prices, 10)
watcher.start()

app = create_app(currencies, prices)
app.run(port=8080)
```

### `DatabaseService`

- `DatabaseService(url)` accepts any SQLAlchemy URL. An in-memory SQLite URL
  shares one connection between all threads.
- `DatabaseService.from_env()` connects the same way the command does.
- `session()` is a context manager. It commits on success and rolls back on
  error.
- The service itself can be used as a context manager, which closes the engine
  on exit.
- `build_database_url(dbname)` and `get_env(key, default)` are the helpers
  behind `from_env()`.

### `CurrencyService`

- `add_currency`
- `remove_currency`
- `get_active_currencies`
- `get_currency_by_symbol`
- `get_currency_by_id`

### `PriceService`

- `save_price`
- `get_price_at_time`
- `get_latest_price`
- `get_price_history`: a limit of `0` means all prices, and a negative limit
  raises `ValueError`.
- `get_prices_by_currency_id`

History and per-currency lookups return the newest prices first.

### `Watcher`

`Watcher(currency_service, price_service, update_interval=10.0)` takes the
interval in seconds.

- `start()` runs the watcher in a daemon thread. The first update comes one
  interval after the start. Calling `start()` while the watcher is running
  raises `RuntimeError`.
- `stop()` waits for that thread to finish.
- `update_prices()` fetches every active coin at once and returns the errors it
  met.
- `fetch_price(symbol)` queries the exchange.

The module also provides `kucoin_url(symbol)` and
`parse_kucoin_response(payload)`.

### Models and errors

The ORM models are `Currency` and `Price` in `trackercore.models`. Each has a
`to_dict()` method.

- `get_currency_by_symbol`, `get_currency_by_id` and the single-price lookups
  of `PriceService` raise `trackercore.models.NotFoundError` when nothing
  matches.
- Fetching a price raises `trackercore.watcher.PriceFetchError` in these cases:
  the exchange cannot be reached, answers with a status other than 200, reports
  an error code, or returns a price that cannot be parsed.

## Limits

- The package has no schema migrations. `create_tables()` only creates the
  tables and indexes that are missing.
- The only price source is KuCoin, and prices are quoted in USDT.

## Tests

```
pip install ".[test]"
pytest
```