from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.http import api_view, current_employee_id, current_role, json_body, login_required, parse_enum
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    @api_view
    def login():
        data = json_body()
        employee = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)

        session["employee_id"] = employee.employee_id
        session["name"] = employee.full_name
        session["role"] = employee.role.value

        return jsonify(
            {
                "success": True,
                "employee": {
                    "employee_id": employee.employee_id,
                    "full_name": employee.full_name,
                    "role": employee.role.value,
                },
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    @api_view
    def me():
        employee = container.auth_service.get_session_employee(current_employee_id())
        return jsonify(
            {
                "success": True,
                "employee": {
                    "employee_id": employee.employee_id,
                    "full_name": employee.full_name,
                    "role": employee.role.value,
                },
            }
        )

    @app.route("/api/employees", methods=["POST"], endpoint="create_employee")
    @login_required
    @api_view
    def create_employee():
        data = json_body()
        employee_id = container.auth_service.create_employee(
            current_role=current_role(),
            full_name=data.get("full_name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            role=parse_enum(Role, data.get("role", Role.STAFF.value), "role"),
        )
        return jsonify({"success": True, "employee_id": employee_id}), 201
