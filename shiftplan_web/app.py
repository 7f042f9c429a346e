"""Application factory for the shift planning API."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from flask import Flask

from .blueprints.employees.routes import bp as employees_bp
from .blueprints.schedule.routes import bp as schedule_bp
from .dao import db as db_module
from .errors import register_error_handlers


DEFAULT_CONFIG: dict[str, Any] = {
    "SECRET_KEY": "dev",
    # Optional JSON/YAML file merged over the default scheduling settings
    "SETTINGS_FILE": None,
    "SHIFTPLAN_SETTINGS": None,
    "AUTOSAVE_TIMERS": True,
}


def create_app(config: dict[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(DEFAULT_CONFIG)

    if config:
        app.config.update(config)

    database_path = app.config.get(
        "DATABASE",
        Path(app.instance_path) / "shiftplan.sqlite",
    )
    if isinstance(database_path, Path):
        database_path = str(database_path)
    app.config["DATABASE"] = database_path

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    db_module.init_app(app)
    register_error_handlers(app)

    app.register_blueprint(employees_bp)
    app.register_blueprint(schedule_bp)

    @app.get("/healthz")
    def healthcheck() -> tuple[str, int]:
        return "OK", 200

    return app
