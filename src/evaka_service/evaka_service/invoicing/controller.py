from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.http import (
    api_view,
    current_role,
    json_body,
    login_required,
    parse_date_arg,
    parse_enum,
    parse_int_arg,
)
from ..container import Container
from ..core.enums import FeeDecisionStatus
from ..core.exceptions import ValidationError
from .model import FeeDecision


def decision_to_json(d: FeeDecision) -> dict:
    return {
        "id": d.id,
        "status": d.status.value,
        "head_of_family_id": d.head_of_family_id,
        "partner_id": d.partner_id,
        "valid_from": format_iso_date(d.valid_from),
        "valid_to": format_iso_date(d.valid_to),
        "family_size": d.family_size,
        "decision_number": d.decision_number,
        "sent_at": d.sent_at.isoformat() if d.sent_at else None,
        "total_fee": d.total_fee,
        "children": [
            {
                "child_id": c.child_id,
                "date_of_birth": format_iso_date(c.date_of_birth),
                "unit_id": c.unit_id,
                "placement_type": c.placement_type.value,
                "base_fee": c.base_fee,
                "sibling_discount": c.sibling_discount,
                "fee": c.fee,
            }
            for c in d.children
        ],
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/fee-decisions/generate", methods=["POST"], endpoint="generate_fee_decisions")
    @login_required
    @api_view
    def generate_fee_decisions():
        data = json_body()
        drafts = container.fee_decision_service.generate_drafts(
            current_role=current_role(),
            head_of_family_id=parse_int_arg(data.get("head_of_family_id"), "head_of_family_id"),
            from_date=parse_date_arg(data["from_date"], "from_date") if data.get("from_date") else None,
        )
        return jsonify({"success": True, "decisions": [decision_to_json(d) for d in drafts]})

    @app.route("/api/fee-decisions/confirm", methods=["POST"], endpoint="confirm_fee_decisions")
    @login_required
    @api_view
    def confirm_fee_decisions():
        ids = json_body().get("ids")
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            raise ValidationError("ids must be a list of decision ids")
        changed = container.fee_decision_service.confirm_drafts(current_role=current_role(), decision_ids=ids)
        return jsonify({"success": True, "decisions": [decision_to_json(d) for d in changed]})

    @app.route("/api/fee-decisions/<decision_id>", methods=["GET"], endpoint="get_fee_decision")
    @login_required
    @api_view
    def get_fee_decision(decision_id: str):
        decision = container.fee_decision_service.get_decision(current_role=current_role(), decision_id=decision_id)
        return jsonify({"success": True, "decision": decision_to_json(decision)})

    @app.route(
        "/api/heads-of-family/<int:head_of_family_id>/fee-decisions",
        methods=["GET"],
        endpoint="head_of_family_fee_decisions",
    )
    @login_required
    @api_view
    def head_of_family_fee_decisions(head_of_family_id: int):
        raw_statuses = request.args.getlist("status")
        statuses = [parse_enum(FeeDecisionStatus, s, "status") for s in raw_statuses] or None
        decisions = container.fee_decision_service.list_for_head_of_family(
            current_role=current_role(), head_of_family_id=head_of_family_id, statuses=statuses
        )
        return jsonify({"success": True, "decisions": [decision_to_json(d) for d in decisions]})
