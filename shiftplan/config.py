# -*- coding: utf-8 -*-
"""
Scheduling settings. Everything the rules need to know about the restaurant
policy lives here; a JSON/YAML file can override any key.
"""
from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from shiftplan.adapters.config_loader import load_config

DEFAULT_SETTINGS: Dict[str, Any] = {
    # Coupure breaks are paid unless the restaurant says otherwise
    "pay_break_times": True,
    # Contract hours used when an employee record has none
    "default_weekly_hours": 35.0,
    # Hard limit of worked segments per employee per day (a coupure is 2)
    "max_shifts_per_day": 2,
    # Paid leave credits weekly_hours / N per day
    "assimilated_days_per_week": 5,
    # Auto-save queue: flush after this many seconds without edits...
    "autosave_inactivity_seconds": 3.0,
    # ...and at the latest every interval while changes are pending
    "autosave_interval_seconds": 30.0,
    # Backoff ceiling for failed flushes
    "autosave_max_backoff_seconds": 300.0,
}


def load_settings(path: Optional[str | Path] = None, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    settings = dict(DEFAULT_SETTINGS)
    if path is not None:
        data = load_config(path)
        unknown = set(data) - set(DEFAULT_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        settings.update(data)
    if overrides:
        settings.update(overrides)
    if int(settings["max_shifts_per_day"]) < 1:
        raise ValueError("max_shifts_per_day must be >= 1")
    if int(settings["assimilated_days_per_week"]) < 1:
        raise ValueError("assimilated_days_per_week must be >= 1")
    return settings


def settings_fingerprint(settings: Mapping[str, Any]) -> str:
    blob = json.dumps(dict(settings), sort_keys=True, default=str)
    return hashlib.sha1(blob.encode("utf-8")).hexdigest()


__all__ = ["DEFAULT_SETTINGS", "load_settings", "settings_fingerprint"]
