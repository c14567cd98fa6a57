from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.validators import require_id
from ..common.web import (
    MANAGER_ROLES,
    api_view,
    date_arg,
    json_body,
    ok,
    roles_required,
    to_json,
    user_json,
)
from ..container import Container
from ..core.enums import NotificationEvent, OwnerKind
from .model import AttendanceRecord


def record_json(record: AttendanceRecord) -> dict:
    return {
        "id": record.attendance_id,
        "studentId": record.student_id,
        "centerId": record.center_id,
        "classId": record.class_id,
        "checkInDate": to_json(record.check_in_date),
        "checkInAt": to_json(record.check_in_at),
        "checkOutAt": to_json(record.check_out_at),
        "checkOutOnly": record.is_check_out_only,
        "wasLate": record.was_late,
        "attendanceStatus": record.status.value,
        "checkInNotificationSent": record.check_in_notification_sent,
        "lateNotificationSent": record.late_notification_sent,
        "checkOutNotificationSent": record.check_out_notification_sent,
    }


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def register(app: Flask, container: Container) -> None:
    tz_name = container.tz_name

    # Pad endpoints are used by the unattended front-desk tablet: no login.
    @app.route("/api/attendance/validate-code", methods=["POST"], endpoint="validate_code")
    @api_view
    def validate_code():
        data = json_body()
        result = container.pad_service.validate_code(data.get("centerId"), data.get("code", ""))
        if result.resolution.kind == OwnerKind.STUDENT:
            return ok(
                type="student",
                student=user_json(result.user),
                classes=[
                    {"id": c.class_id, "name": c.name, "classroom": c.classroom} for c in result.classes
                ],
            )
        return ok(
            type="teacher",
            teacher=user_json(result.user),
            checkInTime=to_json(result.at),
            via=result.resolution.via.value,
            message=f"{result.user.full_name} checked in",
        )

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="pad_check_in")
    @api_view
    def pad_check_in():
        data = json_body()
        result = container.pad_service.check_in(
            data.get("centerId"),
            data.get("code", ""),
            data.get("classId"),
            is_late=_flag(data.get("isLate")),
        )
        return ok(
            student=user_json(result.student),
            checkInTime=to_json(result.record.check_in_at),
            className=result.class_name,
            record=record_json(result.record),
            message=f"{result.student.full_name} checked in",
        )

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="pad_check_out")
    @api_view
    def pad_check_out():
        data = json_body()
        result = container.pad_service.check_out(data.get("centerId"), data.get("code", ""), data.get("classId"))
        return ok(
            student=user_json(result.student),
            checkOutTime=to_json(result.record.check_out_at),
            record=record_json(result.record),
            message=f"{result.student.full_name} checked out",
        )

    @app.route("/api/attendance/manual-checkin", methods=["POST"], endpoint="manual_check_in")
    @roles_required(MANAGER_ROLES)
    @api_view
    def manual_check_in():
        data = json_body()
        record = container.attendance_service.manual_check_in(
            data.get("studentId"), data.get("centerId"), data.get("classId"), _flag(data.get("isLate"))
        )
        return ok(record=record_json(record))

    @app.route("/api/attendance/update-status", methods=["PATCH"], endpoint="update_attendance_status")
    @roles_required(MANAGER_ROLES)
    @api_view
    def update_attendance_status():
        data = json_body()
        record = container.attendance_service.manual_status_update(
            data.get("studentId"), data.get("centerId"), data.get("classId"), data.get("status", "")
        )
        return ok(record=record_json(record))

    @app.route("/api/attendance/resend-notification", methods=["POST"], endpoint="resend_notification")
    @roles_required(MANAGER_ROLES)
    @api_view
    def resend_notification():
        data = json_body()
        event = data.get("type")
        if not event:
            event = NotificationEvent.LATE if _flag(data.get("isLate")) else NotificationEvent.CHECK_IN
        record = container.attendance_service.resend_notification(
            data.get("studentId"), data.get("centerId"), data.get("classId"), event
        )
        return ok(record=record_json(record))

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_for_date")
    @roles_required(MANAGER_ROLES)
    @api_view
    def attendance_for_date():
        center_id = require_id(request.args.get("centerId"), "centerId")
        day = date_arg("date", now_local(tz_name).date())
        rows = container.attendance_service.list_records_for_date(center_id, day)
        return ok(
            date=day.isoformat(),
            records=[
                {
                    **record_json(r.record),
                    "studentName": r.student_name,
                    "grade": r.grade,
                    "className": r.class_name,
                }
                for r in rows
            ],
        )

    @app.route("/api/attendance/history/<int:student_id>", methods=["GET"], endpoint="attendance_history")
    @roles_required(MANAGER_ROLES)
    @api_view
    def attendance_history(student_id: int):
        rows = container.attendance_service.list_records_for_student(
            student_id, date_arg("start"), date_arg("end")
        )
        return ok(records=[{**record_json(r.record), "className": r.class_name} for r in rows])

    @app.route("/api/attendance/<int:attendance_id>/notification-logs", methods=["GET"], endpoint="notification_logs")
    @roles_required(MANAGER_ROLES)
    @api_view
    def notification_logs(attendance_id: int):
        logs = container.attendance_service.notification_logs(attendance_id)
        return ok(logs=to_json(logs))
