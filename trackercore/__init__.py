"""Cryptocurrency price tracker: storage, a KuCoin price watcher and a Flask HTTP API."""

__version__ = "0.1.0"