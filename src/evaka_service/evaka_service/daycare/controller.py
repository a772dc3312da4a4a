from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.http import api_view, current_role, json_body, login_required, parse_date_arg
from ..container import Container
from ..core.exceptions import ValidationError
from ..shared.date_range import FiniteDateRange
from ..shared.date_set import DateSet
from .model import PreschoolTerm


def _range_to_json(r: FiniteDateRange) -> dict:
    return {"start": format_iso_date(r.start), "end": format_iso_date(r.end)}


def _range_from_json(data, field_name: str) -> FiniteDateRange:
    if not isinstance(data, dict):
        raise ValidationError(f"{field_name} must be an object with start and end")
    return FiniteDateRange(
        parse_date_arg(data.get("start"), f"{field_name}.start"),
        parse_date_arg(data.get("end"), f"{field_name}.end"),
    )


def _term_to_json(term: PreschoolTerm) -> dict:
    return {
        "id": term.term_id,
        "finnish_preschool": _range_to_json(term.finnish_preschool),
        "swedish_preschool": _range_to_json(term.swedish_preschool),
        "extended_term": _range_to_json(term.extended_term),
        "application_period": _range_to_json(term.application_period),
        "term_breaks": [_range_to_json(r) for r in term.term_breaks.ranges()],
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/daycares", methods=["GET"], endpoint="list_daycares")
    @login_required
    @api_view
    def list_daycares():
        return jsonify(
            {
                "success": True,
                "daycares": [
                    {
                        "id": d.daycare_id,
                        "name": d.name,
                        "area_code": d.area_code,
                        "operation_days": sorted(d.operation_days),
                        "language": d.language,
                    }
                    for d in container.daycare_service.list_daycares()
                ],
            }
        )

    @app.route("/api/operational-days", methods=["GET"], endpoint="operational_days")
    @login_required
    @api_view
    def operational_days():
        try:
            year = int(request.args.get("year", ""))
            month = int(request.args.get("month", ""))
        except ValueError:
            raise ValidationError("year and month must be integers")

        days = container.daycare_service.operational_days(year, month)
        return jsonify(
            {
                "success": True,
                "full_month": [format_iso_date(d) for d in days.full_month],
                "general_case": [format_iso_date(d) for d in days.general_case],
                "special_cases": {
                    str(unit_id): [format_iso_date(d) for d in dates]
                    for unit_id, dates in days.special_cases.items()
                },
            }
        )

    @app.route("/api/preschool-terms", methods=["GET"], endpoint="list_preschool_terms")
    @login_required
    @api_view
    def list_preschool_terms():
        terms = container.daycare_service.get_preschool_terms()
        return jsonify({"success": True, "terms": [_term_to_json(t) for t in terms]})

    @app.route("/api/preschool-terms", methods=["POST"], endpoint="create_preschool_term")
    @login_required
    @api_view
    def create_preschool_term():
        data = json_body()
        term = PreschoolTerm(
            finnish_preschool=_range_from_json(data.get("finnish_preschool"), "finnish_preschool"),
            swedish_preschool=_range_from_json(data.get("swedish_preschool"), "swedish_preschool"),
            extended_term=_range_from_json(data.get("extended_term"), "extended_term"),
            application_period=_range_from_json(data.get("application_period"), "application_period"),
            term_breaks=DateSet(_range_from_json(r, "term_breaks") for r in data.get("term_breaks") or []),
        )
        term_id = container.daycare_service.insert_preschool_term(current_role=current_role(), term=term)
        return jsonify({"success": True, "id": term_id}), 201

    @app.route("/api/holidays", methods=["POST"], endpoint="add_holiday")
    @login_required
    @api_view
    def add_holiday():
        data = json_body()
        container.daycare_service.add_holiday(
            current_role=current_role(),
            holiday=parse_date_arg(data.get("date"), "date"),
            description=data.get("description"),
        )
        return jsonify({"success": True}), 201
