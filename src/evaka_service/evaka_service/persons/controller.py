from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import format_iso_date
from ..common.http import api_view, current_role, json_body, login_required, parse_date_arg, parse_int_arg
from ..container import Container
from ..core.exceptions import NotFoundError
from .model import Partnership


def _partnership_to_json(p: Partnership) -> dict:
    return {
        "id": p.partnership_id,
        "person_id": p.person_id,
        "partner_id": p.partner_id,
        "start_date": format_iso_date(p.start_date),
        "end_date": format_iso_date(p.end_date),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/partnerships", methods=["POST"], endpoint="create_partnership")
    @login_required
    @api_view
    def create_partnership():
        data = json_body()
        end_date = data.get("end_date")
        partnership = container.partnership_service.create_partnership(
            current_role=current_role(),
            person_id=parse_int_arg(data.get("person_id"), "person_id"),
            partner_id=parse_int_arg(data.get("partner_id"), "partner_id"),
            start_date=parse_date_arg(data.get("start_date"), "start_date"),
            end_date=parse_date_arg(end_date, "end_date") if end_date else None,
        )
        return jsonify({"success": True, "partnership": _partnership_to_json(partnership)}), 201

    @app.route("/api/partnerships/<int:partnership_id>", methods=["PUT"], endpoint="update_partnership")
    @login_required
    @api_view
    def update_partnership(partnership_id: int):
        data = json_body()
        end_date = data.get("end_date")
        container.partnership_service.update_partnership_duration(
            current_role=current_role(),
            partnership_id=partnership_id,
            start_date=parse_date_arg(data.get("start_date"), "start_date"),
            end_date=parse_date_arg(end_date, "end_date") if end_date else None,
        )
        return jsonify({"success": True})

    @app.route("/api/partnerships/<int:partnership_id>", methods=["DELETE"], endpoint="delete_partnership")
    @login_required
    @api_view
    def delete_partnership(partnership_id: int):
        deleted = container.partnership_service.delete_partnership(
            current_role=current_role(), partnership_id=partnership_id
        )
        if deleted is None:
            raise NotFoundError(f"No partnership found with id {partnership_id}")
        return jsonify({"success": True, "partnership": _partnership_to_json(deleted)})
