"""Flask JSON API over the shift planning engine."""

from .app import create_app

__all__ = ["create_app"]
