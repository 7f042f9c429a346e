"""Adapters between the rules and the outside world (config files, SQLite)."""
