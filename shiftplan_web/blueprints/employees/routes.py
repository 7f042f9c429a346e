"""Employees, their availability periods and their preferences."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from shiftplan.domain.models import AvailabilityPeriod, Employee, PreferenceSet
from shiftplan.domain.week import parse_week
from shiftplan.rules.contract_window import active_roster

from ...dao.db import get_planner
from ...errors import ApiError

bp = Blueprint("employees", __name__)


def _payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ApiError("Expected a JSON object")
    return payload


def _employee_or_404(emp_id: str) -> Employee:
    employee = get_planner().store.get_employee(emp_id)
    if employee is None:
        raise ApiError(f"Unknown employee {emp_id}", status=404, code="unknown_employee")
    return employee


@bp.get("/api/employees")
def list_employees():
    employees = get_planner().store.employees()
    week_value = request.args.get("week")
    if week_value:
        try:
            employees = active_roster(employees, parse_week(week_value))
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
    return jsonify({"employees": [e.to_record() for e in employees]})


@bp.post("/api/employees")
def create_employee():
    payload = _payload()
    if "weekly_hours_target" not in payload:
        payload["weekly_hours_target"] = get_planner().settings["default_weekly_hours"]
    try:
        employee = Employee.from_record(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(f"Invalid employee: {exc}") from exc

    planner = get_planner()
    planner.repository.save_employee(employee)
    planner.store.add_employee(employee)
    current_app.logger.info("saved employee %s", employee.id)
    return jsonify({"id": employee.id}), 201


@bp.get("/api/employees/<emp_id>")
def get_employee(emp_id: str):
    return jsonify(_employee_or_404(emp_id).to_record())


@bp.get("/api/employees/<emp_id>/availability")
def list_availability(emp_id: str):
    _employee_or_404(emp_id)
    periods = get_planner().repository.get_availability(emp_id)
    return jsonify({"availability": [p.to_record() for p in periods]})


@bp.post("/api/employees/<emp_id>/availability")
def add_availability(emp_id: str):
    _employee_or_404(emp_id)
    payload = _payload()
    payload["employee_id"] = emp_id
    try:
        period = AvailabilityPeriod.from_record(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(f"Invalid availability period: {exc}") from exc
    get_planner().repository.add_availability(period)
    return jsonify({"id": period.id}), 201


@bp.delete("/api/employees/<emp_id>/availability/<period_id>")
def delete_availability(emp_id: str, period_id: str):
    _employee_or_404(emp_id)
    deleted = get_planner().repository.delete_availability(period_id)
    return jsonify({"deleted": deleted})


@bp.get("/api/employees/<emp_id>/preferences")
def get_preferences(emp_id: str):
    _employee_or_404(emp_id)
    preferences = get_planner().repository.get_preferences(emp_id)
    return jsonify({"preferences": preferences.to_record() if preferences else None})


@bp.put("/api/employees/<emp_id>/preferences")
def save_preferences(emp_id: str):
    _employee_or_404(emp_id)
    payload = _payload()
    payload["employee_id"] = emp_id
    try:
        preferences = PreferenceSet.from_record(payload)
    except (TypeError, ValueError) as exc:
        raise ApiError(f"Invalid preferences: {exc}") from exc
    get_planner().repository.save_preferences(preferences)
    return jsonify({"preferences": preferences.to_record()})
