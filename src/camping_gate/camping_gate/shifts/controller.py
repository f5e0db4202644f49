from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, json_body, ok, permission_required
from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import ValidationError


def _camping_id_arg() -> int:
    raw = request.args.get("camping_id") or request.args.get("campingId")
    if not raw or not raw.isdigit():
        raise ValidationError("camping_id query parameter is required")
    return int(raw)


def register(app: Flask, container: Container) -> None:
    access = container.access_policy
    shifts = container.shift_service

    @app.route("/api/periodos-caja/abrir", methods=["POST"], endpoint="api_open_shift")
    @permission_required(access, Permission.OPEN_SHIFT, Permission.MANAGE_SHIFTS)
    def api_open_shift():
        data = json_body()
        shift = shifts.open(data.get("camping_id"), current_user_id(), data.get("notes"))
        return ok(shift.to_dict(), status=201, message="Shift opened")

    @app.route("/api/periodos-caja/<int:shift_id>/cerrar", methods=["PUT", "POST"], endpoint="api_close_shift")
    @permission_required(access, Permission.CLOSE_SHIFT, Permission.MANAGE_SHIFTS)
    def api_close_shift(shift_id: int):
        data = request.get_json(silent=True) or {}
        shift = shifts.close(shift_id, current_user_id(), data.get("notes"))
        return ok(shift.to_dict(), message="Shift closed")

    @app.route("/api/periodos-caja/activo", methods=["GET"], endpoint="api_active_shift")
    @permission_required(access, Permission.OPEN_SHIFT, Permission.READ_SHIFTS, Permission.MANAGE_SHIFTS)
    def api_active_shift():
        shift = shifts.get_active(_camping_id_arg(), current_user_id())
        return ok(shift.to_dict() if shift else None)

    @app.route("/api/periodos-caja/historial", methods=["GET"], endpoint="api_shift_history")
    @permission_required(access, Permission.OPEN_SHIFT, Permission.READ_SHIFTS, Permission.MANAGE_SHIFTS)
    def api_shift_history():
        limit = request.args.get("limite", type=int) or request.args.get("limit", type=int)
        history = shifts.get_history(_camping_id_arg(), current_user_id(), limit)
        return ok([s.to_dict() for s in history])

    @app.route("/api/periodos-caja/<int:shift_id>", methods=["GET"], endpoint="api_shift_detail")
    @permission_required(access, Permission.OPEN_SHIFT, Permission.READ_SHIFTS, Permission.MANAGE_SHIFTS)
    def api_shift_detail(shift_id: int):
        detail = shifts.get_detail(shift_id, current_user_id())
        payload = detail.shift.to_dict()
        payload["visits"] = [
            {
                "id": v.visit_id,
                "uuid": v.uuid,
                "entered_at": v.entered_at.isoformat() if v.entered_at else None,
                "dni": v.document_number,
                "full_name": v.full_name,
            }
            for v in detail.visits
        ]
        return ok(payload)
