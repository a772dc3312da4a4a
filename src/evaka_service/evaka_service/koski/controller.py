from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.http import api_view, login_required, parse_enum, period_from_args
from ..container import Container
from ..core.enums import KoskiStatus
from ..shared.date_set import DateSet


def _date_set_to_json(dates: DateSet) -> list[dict]:
    return [{"start": format_iso_date(r.start), "end": format_iso_date(r.end)} for r in dates.ranges()]


def register(app: Flask, container: Container) -> None:
    @app.route("/api/children/<int:child_id>/koski/timelines", methods=["GET"], endpoint="koski_timelines")
    @login_required
    @api_view
    def koski_timelines(child_id: int):
        timelines = container.koski_service.get_timelines(child_id=child_id, period=period_from_args())
        return jsonify(
            {
                "success": True,
                "placement": _date_set_to_json(timelines.placement),
                "present": _date_set_to_json(timelines.present),
                "planned_absence": _date_set_to_json(timelines.planned_absence),
                "sick_leave_absence": _date_set_to_json(timelines.sick_leave_absence),
                "unknown_absence": _date_set_to_json(timelines.unknown_absence),
            }
        )

    @app.route(
        "/api/children/<int:child_id>/koski/study-right-periods",
        methods=["GET"],
        endpoint="koski_study_right_periods",
    )
    @login_required
    @api_view
    def koski_study_right_periods(child_id: int):
        termination = request.args.get("termination")
        periods = container.koski_service.get_study_right_periods(
            child_id=child_id,
            period=period_from_args(),
            termination=parse_enum(KoskiStatus, termination, "termination") if termination else None,
        )
        return jsonify(
            {
                "success": True,
                "periods": [{"start": format_iso_date(p.start), "status": p.status.value} for p in periods],
            }
        )
