"""Wiring of the repository, shift store and auto-save queue for the web app."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import click
from flask import Flask, current_app
from flask.cli import with_appcontext

from shiftplan.adapters.repository import ScheduleRepository
from shiftplan.config import load_settings
from shiftplan.services.autosave import AutoSaveQueue
from shiftplan.services.shift_store import ShiftStore
from shiftplan.services.summary_service import SummaryCache

EXTENSION_KEY = "shiftplan"


@dataclass
class Planner:
    repository: ScheduleRepository
    store: ShiftStore
    queue: AutoSaveQueue
    cache: SummaryCache
    settings: Dict[str, Any] = field(default_factory=dict)


def build_planner(app: Flask) -> Planner:
    """Open the database and load the employee registry into a fresh store."""
    settings = load_settings(app.config.get("SETTINGS_FILE"), app.config.get("SHIFTPLAN_SETTINGS"))
    repository = ScheduleRepository(app.config["DATABASE"])
    timers = app.config.get("AUTOSAVE_TIMERS", True)
    queue = AutoSaveQueue(
        repository.apply_change,
        inactivity_timeout=settings["autosave_inactivity_seconds"] if timers else None,
        max_delay=settings["autosave_interval_seconds"],
        max_backoff=settings["autosave_max_backoff_seconds"],
    )
    store = ShiftStore(
        repository.list_employees(),
        settings=settings,
        queue=queue,
        loader=repository.load_week,
    )
    return Planner(repository=repository, store=store, queue=queue, cache=SummaryCache(), settings=settings)


def init_app(app: Flask) -> None:
    """Attach the planner and CLI commands to the app."""
    app.extensions[EXTENSION_KEY] = build_planner(app)
    app.cli.add_command(init_db_command)


def get_planner() -> Planner:
    return current_app.extensions[EXTENSION_KEY]


def initialize_database(app: Flask, *, drop_existing: bool) -> None:
    previous = app.extensions.get(EXTENSION_KEY)
    if previous is not None:
        previous.queue.close(flush=not drop_existing)
    database_path = Path(app.config["DATABASE"])
    if drop_existing and database_path.exists():
        database_path.unlink()
    app.extensions[EXTENSION_KEY] = build_planner(app)


@click.command("init-db")
@click.option("--force", is_flag=True, help="Recreate the database from scratch.")
@with_appcontext
def init_db_command(force: bool) -> None:
    """Create the SQLite schema."""
    app = current_app._get_current_object()  # type: ignore[attr-defined]
    initialize_database(app, drop_existing=force)
    click.echo("Database initialized.")
