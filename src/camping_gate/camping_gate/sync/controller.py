from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, json_body, ok, permission_required
from ..container import Container
from ..core.constants import DEFAULT_SYNC_LOG_LIMIT
from ..core.enums import Permission
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    access = container.access_policy
    sync = container.sync_service

    @app.route("/api/sync/visitas", methods=["POST"], endpoint="api_sync_visits")
    @permission_required(access, Permission.SYNC_VISITS)
    def api_sync_visits():
        data = json_body()
        result = sync.sync_visits(data.get("camping_id"), data.get("visits"), current_user_id())
        return ok(result.to_dict())

    @app.route("/api/sync/logs", methods=["GET"], endpoint="api_sync_logs")
    @permission_required(access, Permission.SYNC_VISITS)
    def api_sync_logs():
        camping_id = request.args.get("camping_id", type=int)
        if not camping_id:
            raise ValidationError("camping_id query parameter is required")
        limit = request.args.get("limit", DEFAULT_SYNC_LOG_LIMIT, type=int)
        return ok([log.to_dict() for log in sync.list_logs(camping_id, current_user_id(), limit)])
