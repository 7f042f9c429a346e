"""Week schedule API: shift mutations, summaries, conflicts and saving."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from shiftplan.domain.models import shift_from_record, shift_to_record
from shiftplan.domain.week import parse_week
from shiftplan.rules.mutations import MutationRequest, MutationResult, Rejected
from shiftplan.services.summary_service import format_hours, format_hours_diff, week_conflicts, week_summaries

from ...dao.db import get_planner
from ...errors import ApiError, rule_error_response

bp = Blueprint("schedule", __name__)


def _week(value: str) -> date:
    try:
        return parse_week(value)
    except ValueError as exc:
        raise ApiError(str(exc), code="invalid_week") from exc


def _payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ApiError("Expected a JSON object")
    return payload


def _expected_version(payload: Dict[str, Any]) -> Optional[int]:
    value = payload.get("expected_version", request.args.get("expected_version"))
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ApiError("expected_version must be an integer") from exc


def _apply(week_start: date, mutation: MutationRequest, expected_version: Optional[int], status: int = 200):
    planner = get_planner()
    result: MutationResult = planner.store.apply(week_start, mutation, expected_version=expected_version)
    version = planner.store.week(week_start).version
    if isinstance(result, Rejected):
        current_app.logger.info("rejected %s: %s", mutation.kind.value, result.error.code)
        return rule_error_response(result.error, {"version": version})
    body: Dict[str, Any] = {
        "ok": True,
        "version": version,
        "superseded": list(result.superseded_ids),
    }
    if result.request.shift is not None:
        body["shift"] = shift_to_record(result.request.shift)
    return jsonify(body), status


@bp.get("/api/weeks/<week>/shifts")
def list_shifts(week: str):
    week_start = _week(week)
    snapshot = get_planner().store.week(week_start)
    employee_id = request.args.get("employee_id")
    shifts = snapshot.shifts_for_employee(employee_id) if employee_id else snapshot.shifts()
    return jsonify(
        {
            "week_start": week_start.isoformat(),
            "version": snapshot.version,
            "shifts": [shift_to_record(s) for s in shifts],
        }
    )


@bp.post("/api/weeks/<week>/shifts")
def create_shift(week: str):
    week_start = _week(week)
    payload = _payload()
    shift = shift_from_record(payload)
    return _apply(week_start, MutationRequest.create(shift), _expected_version(payload), status=201)


@bp.put("/api/weeks/<week>/shifts/<shift_id>")
def update_shift(week: str, shift_id: str):
    week_start = _week(week)
    payload = _payload()
    payload["id"] = shift_id
    shift = shift_from_record(payload)
    return _apply(week_start, MutationRequest.update(shift), _expected_version(payload))


@bp.delete("/api/weeks/<week>/shifts/<shift_id>")
def delete_shift(week: str, shift_id: str):
    week_start = _week(week)
    payload = request.get_json(silent=True) or {}
    employee_id = payload.get("employee_id") or request.args.get("employee_id")
    if not employee_id:
        existing = get_planner().store.week(week_start).get_shift(shift_id)
        employee_id = existing.employee_id if existing else ""
    return _apply(week_start, MutationRequest.delete(employee_id, shift_id), _expected_version(payload))


@bp.get("/api/weeks/<week>/summaries")
def list_summaries(week: str):
    week_start = _week(week)
    planner = get_planner()
    snapshot = planner.store.week(week_start)
    summaries = week_summaries(planner.store.employees(), snapshot, planner.settings, cache=planner.cache)
    rows = []
    for summary in summaries.values():
        row = summary.to_dict()
        row["worked_label"] = format_hours(summary.total_worked_hours)
        row["diff_label"] = format_hours_diff(summary.hours_diff)
        row["is_overtime"] = summary.is_overtime
        rows.append(row)
    return jsonify({"week_start": week_start.isoformat(), "version": snapshot.version, "summaries": rows})


@bp.get("/api/weeks/<week>/conflicts")
def list_conflicts(week: str):
    week_start = _week(week)
    planner = get_planner()
    flags = week_conflicts(
        planner.store.employees(),
        planner.store.week(week_start),
        planner.repository.get_availability,
        planner.repository.get_preferences,
    )
    return jsonify({"week_start": week_start.isoformat(), "conflicts": [f.to_dict() for f in flags]})


@bp.post("/api/weeks/<week>/duplicate")
def duplicate_week(week: str):
    week_start = _week(week)
    report = get_planner().store.duplicate_week(week_start)
    return jsonify(
        {
            "source_week": report.source_week.isoformat(),
            "target_week": report.target_week.isoformat(),
            "copied": report.copied,
            "skipped": report.skipped,
            "rejected": [
                {"shift_id": r.request.shift_id, "error": r.error.to_dict()}
                for r in report.rejected
                if isinstance(r, Rejected)
            ],
        }
    )


@bp.post("/api/save")
def force_save():
    result = get_planner().queue.flush()
    body = {"ok": result.ok, "saved": len(result.saved), "failed": len(result.failed)}
    return jsonify(body), 200 if result.ok else 503
