from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.web import current_user_id, json_body, ok, permission_required
from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import ValidationError
from .model import NewVisit


def register(app: Flask, container: Container) -> None:
    access = container.access_policy
    visits = container.visit_service

    @app.route("/api/visitas", methods=["POST"], endpoint="api_create_visit")
    @permission_required(access, Permission.CREATE_VISITS)
    def api_create_visit():
        data = json_body()
        companions = data.get("companions")
        if companions is not None and not isinstance(companions, list):
            raise ValidationError("companions must be a list")

        created = visits.create_visit(
            NewVisit(
                camping_id=data.get("camping_id"),
                person_id=data.get("person_id"),
                affiliate_id=data.get("affiliate_id"),
                shift_id=data.get("shift_id"),
                companions=companions,
                notes=data.get("notes"),
                is_offline=bool(data.get("is_offline", False)),
                uuid=data.get("uuid"),
            ),
            current_user_id(),
        )
        return ok(created.to_dict(), status=201 if created.created else 200)

    @app.route("/api/visitas/batch", methods=["POST"], endpoint="api_create_visits_batch")
    @permission_required(access, Permission.CREATE_VISITS)
    def api_create_visits_batch():
        data = json_body()
        batch = visits.create_visits_batch(
            data.get("camping_id"),
            data.get("shift_id"),
            data.get("people") or data.get("items"),
            current_user_id(),
            notes=data.get("notes"),
            is_offline=bool(data.get("is_offline", False)),
        )
        return ok(batch.to_dict(), status=201)

    @app.route("/api/visitas/dia", methods=["GET"], endpoint="api_visits_by_day")
    @permission_required(access, Permission.READ_VISITS)
    def api_visits_by_day():
        camping_id = request.args.get("camping_id", type=int)
        if not camping_id:
            raise ValidationError("camping_id query parameter is required")

        raw_day = request.args.get("fecha") or request.args.get("date")
        try:
            day = parse_iso_date(raw_day) if raw_day else now_local().date()
        except ValueError:
            raise ValidationError("fecha must be YYYY-MM-DD")

        rows = visits.list_visits_by_day(camping_id, day, current_user_id())
        return ok([v.to_dict() for v in rows], date=day.isoformat(), total=len(rows))
