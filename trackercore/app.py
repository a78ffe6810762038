"""HTTP application assembly and the service entry point."""

import logging
from datetime import datetime, timezone

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from .currency_service import CurrencyService
from .database import DatabaseService, get_env
from .handlers import create_blueprint
from .price_service import PriceService
from .watcher import Watcher

log = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def create_app(currency_service, price_service):
    """Build the Flask application with CORS handling, the currency API and /health."""
    app = Flask(__name__)
    app.register_blueprint(create_blueprint(currency_service, price_service))

    @app.before_request
    def _preflight():
        return ("", 204) if request.method == "OPTIONS" else None

    @app.after_request
    def _cors(response):
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/health")
    def health():
        return jsonify(status="ok", timestamp=datetime.now(timezone.utc).isoformat())

    return app


def main(argv=None):
    """Run the tracker service; return the process exit status."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    if not load_dotenv(".env"):
        log.info(".env file not found, using default environment variables")

    try:
        database = DatabaseService.from_env()
    except (RuntimeError, ValueError, SQLAlchemyError) as exc:
        log.error("Database initialization error: %s", exc)
        return 1

    with database:
        try:
            database.create_tables()
        except RuntimeError as exc:
            log.error("Table creation error: %s", exc)
            return 1

        currency_service = CurrencyService(database)
        price_service = PriceService(database)
        watcher = Watcher(currency_service, price_service)
        watcher.start()
        try:
            port = get_env("PORT", "8080")
            log.info("Server running on port %s", port)
            create_app(currency_service, price_service).run(host="0.0.0.0", port=int(port))
        except (OSError, ValueError) as exc:
            log.error("Server startup error: %s", exc)
            return 1
        finally:
            watcher.stop()
    return 0