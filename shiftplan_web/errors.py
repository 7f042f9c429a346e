"""JSON error responses shared by the API blueprints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify
from flask.typing import ResponseReturnValue

from shiftplan.domain.errors import (
    InvalidShiftError,
    PersistError,
    ShiftRuleError,
    UnknownEmployeeError,
    UnknownShiftError,
)

NOT_FOUND_ERRORS = (UnknownEmployeeError, UnknownShiftError)


class ApiError(Exception):
    """Bad request payloads and unknown resources outside the shift rules."""

    def __init__(self, message: str, status: int = 400, code: str = "bad_request") -> None:
        super().__init__(message)
        self.status = status
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": str(self)}


def status_for(error: ShiftRuleError) -> int:
    if isinstance(error, NOT_FOUND_ERRORS):
        return 404
    return 409


def rule_error_response(error: ShiftRuleError, extra: Optional[Dict[str, Any]] = None) -> ResponseReturnValue:
    body: Dict[str, Any] = {"ok": False, "error": error.to_dict()}
    if extra:
        body.update(extra)
    return jsonify(body), status_for(error)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError) -> ResponseReturnValue:
        return jsonify({"ok": False, "error": exc.to_dict()}), exc.status

    @app.errorhandler(InvalidShiftError)
    def handle_invalid_shift(exc: InvalidShiftError) -> ResponseReturnValue:
        return jsonify({"ok": False, "error": {"code": "invalid_shift", "message": str(exc)}}), 400

    @app.errorhandler(PersistError)
    def handle_persist_error(exc: PersistError) -> ResponseReturnValue:
        app.logger.error("persistence failed: %s", exc)
        return jsonify({"ok": False, "error": {"code": "persist_failed", "message": str(exc)}}), 503

    @app.errorhandler(ShiftRuleError)
    def handle_rule_error(exc: ShiftRuleError) -> ResponseReturnValue:
        # Stored rows that break the current settings (e.g. a lowered shift limit).
        app.logger.warning("stored schedule violates rules: %s", exc)
        return rule_error_response(exc)
