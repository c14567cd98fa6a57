from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.web import MANAGER_ROLES, api_view, json_body, ok, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    @api_view
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.permanent = bool(data.get("rememberMe"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return ok(user={"id": s_user.user_id, "name": s_user.full_name, "role": s_user.role.value})

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/students", methods=["POST"], endpoint="onboard_student")
    @roles_required(MANAGER_ROLES)
    @api_view
    def onboard_student():
        data = json_body()
        result = container.user_service.onboard_student(
            center_id=data.get("centerId"),
            full_name=data.get("name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            phone=data.get("phone"),
            mother_phone=data.get("motherPhone"),
            father_phone=data.get("fatherPhone"),
            grade=data.get("grade"),
            attendance_code=data.get("attendanceCode"),
        )
        return ok(userId=result.user_id, attendanceCode=result.code, codeError=result.code_error), 201

    @app.route("/api/staff", methods=["POST"], endpoint="onboard_staff")
    @roles_required([Role.ADMIN, Role.PRINCIPAL])
    @api_view
    def onboard_staff():
        data = json_body()
        try:
            role = Role(data.get("role") or Role.TEACHER.value)
        except ValueError:
            raise ValidationError("Invalid role")
        result = container.user_service.onboard_staff(
            center_id=data.get("centerId"),
            full_name=data.get("name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            role=role,
            phone=data.get("phone"),
            check_in_code=data.get("checkInCode"),
        )
        return ok(userId=result.user_id, checkInCode=result.code, codeError=result.code_error), 201
