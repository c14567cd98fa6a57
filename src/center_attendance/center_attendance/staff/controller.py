from __future__ import annotations

from flask import Flask, request, session

from ..common.datetime_utils import now_local
from ..common.validators import require_id
from ..common.web import MANAGER_ROLES, api_view, date_arg, json_body, login_required, ok, roles_required, to_json
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


def register(app: Flask, container: Container) -> None:
    tz_name = container.tz_name

    @app.route("/api/staff-check-in-settings", methods=["GET"], endpoint="staff_check_in_settings")
    @roles_required(MANAGER_ROLES)
    @api_view
    def staff_check_in_settings():
        center_id = require_id(request.args.get("centerId"), "centerId")
        teacher_id = request.args.get("teacherId")
        if teacher_id:
            settings = container.staff_service.get_settings(teacher_id, center_id)
            return ok(settings=to_json(settings))
        return ok(settings=to_json(container.staff_service.list_settings(center_id)))

    @app.route("/api/staff-check-in-settings", methods=["POST"], endpoint="save_staff_check_in_settings")
    @roles_required(MANAGER_ROLES)
    @api_view
    def save_staff_check_in_settings():
        data = json_body()
        teacher_id = data.get("teacherId")
        # Teachers may only edit their own code.
        if session.get("role") == Role.TEACHER.value and str(teacher_id) != str(session.get("user_id")):
            raise AuthorizationError("You can only change your own check-in code")
        recipients = data.get("recipients")
        if recipients is None:
            recipients = [data.get("smsRecipient1"), data.get("smsRecipient2")]
        if not isinstance(recipients, list):
            raise ValidationError("recipients must be a list")
        settings = container.staff_service.save_settings(
            teacher_id,
            data.get("centerId"),
            data.get("checkInCode", ""),
            recipients=recipients,
            message_template=data.get("messageTemplate"),
            is_active=data.get("isActive", True) not in (False, 0, "0", "false"),
        )
        return ok(settings=to_json(settings))

    @app.route("/api/staff-work/punch", methods=["POST"], endpoint="staff_punch")
    @login_required
    @api_view
    def staff_punch():
        data = json_body()
        teacher_id = data.get("teacherId") or session.get("user_id")
        if str(teacher_id) != str(session.get("user_id")) and session.get("role") not in (
            Role.ADMIN.value,
            Role.PRINCIPAL.value,
        ):
            raise AuthorizationError("You can only punch for yourself")
        result = container.staff_service.punch(teacher_id, data.get("centerId"))
        return ok(action=result.action, record=to_json(result.record))

    @app.route("/api/staff-work-records", methods=["GET"], endpoint="staff_work_records")
    @roles_required(MANAGER_ROLES)
    @api_view
    def staff_work_records():
        center_id = require_id(request.args.get("centerId"), "centerId")
        today = now_local(tz_name).date()
        start = date_arg("start", today.replace(day=1))
        end = date_arg("end", today)
        records = container.staff_service.list_work_records(center_id, start, end)
        return ok(records=to_json(records))

    @app.route("/api/staff-work-days", methods=["GET"], endpoint="staff_work_days")
    @roles_required(MANAGER_ROLES)
    @api_view
    def staff_work_days():
        center_id = require_id(request.args.get("centerId"), "centerId")
        month = request.args.get("month") or now_local(tz_name).strftime("%Y-%m")
        summaries = container.staff_service.work_days_for_month(center_id, month)
        return ok(month=month, workDays=to_json(summaries))
