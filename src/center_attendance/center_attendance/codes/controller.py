from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_id
from ..common.web import MANAGER_ROLES, api_view, json_body, ok, roles_required, to_json
from ..container import Container
from ..core.enums import OwnerKind
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance-codes", methods=["GET"], endpoint="list_attendance_codes")
    @roles_required(MANAGER_ROLES)
    @api_view
    def list_attendance_codes():
        center_id = require_id(request.args.get("centerId"), "centerId")
        return ok(codes=to_json(container.code_registry.list_codes(center_id)))

    @app.route("/api/attendance-codes", methods=["POST"], endpoint="register_attendance_code")
    @roles_required(MANAGER_ROLES)
    @api_view
    def register_attendance_code():
        data = json_body()
        try:
            owner_kind = OwnerKind(str(data.get("ownerKind") or OwnerKind.STUDENT.value).upper())
        except ValueError:
            raise ValidationError("ownerKind must be STUDENT or STAFF")
        code = container.code_registry.register_code(
            data.get("centerId"),
            data.get("ownerId"),
            owner_kind,
            proposed_code=data.get("code"),
            phone=data.get("phone"),
        )
        return ok(code=to_json(code)), 201

    @app.route("/api/attendance-codes/<int:code_id>/deactivate", methods=["POST"], endpoint="deactivate_attendance_code")
    @roles_required(MANAGER_ROLES)
    @api_view
    def deactivate_attendance_code(code_id: int):
        return ok(code=to_json(container.code_registry.deactivate(code_id)))

    @app.route("/api/attendance-codes/auto-generate", methods=["POST"], endpoint="auto_generate_codes")
    @roles_required(MANAGER_ROLES)
    @api_view
    def auto_generate_codes():
        data = json_body()
        result = container.code_registry.auto_generate_missing_codes(data.get("centerId"))
        return ok(
            created=len(result.created),
            skipped=len(result.skipped),
            details=to_json(result),
        )
