from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import format_iso_date
from ..common.http import (
    api_view,
    current_employee_id,
    current_role,
    json_body,
    login_required,
    parse_date_arg,
    parse_enum,
    parse_int_arg,
    period_from_args,
)
from ..container import Container
from ..core.enums import AbsenceCategory, AbsenceType
from ..core.exceptions import ValidationError
from .model import AbsenceDelete, AbsenceUpsert


def _items(data: dict) -> list[dict]:
    items = data.get("absences")
    if not isinstance(items, list):
        raise ValidationError("absences must be a list")
    return items


def _upserts(data: dict) -> list[AbsenceUpsert]:
    return [
        AbsenceUpsert(
            child_id=parse_int_arg(item.get("child_id"), "child_id"),
            date=parse_date_arg(item.get("date"), "date"),
            category=parse_enum(AbsenceCategory, item.get("category"), "category"),
            absence_type=parse_enum(AbsenceType, item.get("absence_type"), "absence_type"),
        )
        for item in _items(data)
    ]


def register(app: Flask, container: Container) -> None:
    @app.route("/api/children/<int:child_id>/absences", methods=["GET"], endpoint="child_absences")
    @login_required
    @api_view
    def child_absences(child_id: int):
        absences = container.absence_service.get_child_absences(child_id=child_id, period=period_from_args())
        return jsonify(
            {
                "success": True,
                "absences": [
                    {
                        "id": a.absence_id,
                        "child_id": a.child_id,
                        "date": format_iso_date(a.date),
                        "category": a.category.value,
                        "absence_type": a.absence_type.value,
                        "modified_by": a.modified_by,
                        "modified_at": a.modified_at.isoformat(),
                    }
                    for a in absences
                ],
            }
        )

    @app.route("/api/absences", methods=["POST"], endpoint="insert_absences")
    @login_required
    @api_view
    def insert_absences():
        absences = _upserts(json_body())
        container.absence_service.insert_absences(
            current_role=current_role(), user_id=current_employee_id(), absences=absences
        )
        return jsonify({"success": True}), 201

    @app.route("/api/absences/upsert", methods=["POST"], endpoint="upsert_absences")
    @login_required
    @api_view
    def upsert_absences():
        ids = container.absence_service.upsert_absences(
            current_role=current_role(), user_id=current_employee_id(), absences=_upserts(json_body())
        )
        return jsonify({"success": True, "ids": ids})

    @app.route("/api/absences/delete", methods=["POST"], endpoint="delete_absences")
    @login_required
    @api_view
    def delete_absences():
        deletions = [
            AbsenceDelete(
                child_id=parse_int_arg(item.get("child_id"), "child_id"),
                date=parse_date_arg(item.get("date"), "date"),
                category=parse_enum(AbsenceCategory, item.get("category"), "category"),
            )
            for item in _items(json_body())
        ]
        ids = container.absence_service.delete_absences(current_role=current_role(), deletions=deletions)
        return jsonify({"success": True, "ids": ids})
