from __future__ import annotations

import io
from datetime import datetime

from flask import Flask, jsonify, request, send_file

from ..common.http import api_view, current_role, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .service import FeeDecisionReport

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _report_to_json(report: FeeDecisionReport) -> dict:
    return {
        "period": {"start": report.period.start.isoformat(), "end": report.period.end.isoformat()},
        "rows": [
            {
                "area_code": r.area_code,
                "amount_of_decisions": r.amount_of_decisions,
                "total_sum": r.total_sum_cents,
                "amount_without_ssn": r.amount_without_ssn,
                "amount_without_address": r.amount_without_address,
                "amount_with_zero_price": r.amount_with_zero_price,
            }
            for r in report.report_rows
        ],
        "total_amount_of_decisions": report.total_amount_of_decisions,
        "total_sum": report.total_sum_cents,
        "total_amount_without_ssn": report.total_amount_without_ssn,
        "total_amount_without_address": report.total_amount_without_address,
        "total_amount_with_zero_price": report.total_amount_with_zero_price,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/fee-decisions", methods=["GET"], endpoint="fee_decision_report")
    @login_required
    @api_view
    def fee_decision_report():
        try:
            month_of = datetime.strptime(request.args.get("month", ""), "%Y-%m").date()
        except ValueError:
            raise ValidationError("month must be given as YYYY-MM")

        service = container.fee_decision_report_service
        report = service.build_monthly_report(current_role=current_role(), month_of=month_of)

        if request.args.get("format") == "xlsx":
            return send_file(
                io.BytesIO(service.export_xlsx(report)),
                mimetype=XLSX_MIMETYPE,
                as_attachment=True,
                download_name=f"fee_decisions_{month_of:%Y_%m}.xlsx",
            )
        return jsonify({"success": True, "report": _report_to_json(report)})
