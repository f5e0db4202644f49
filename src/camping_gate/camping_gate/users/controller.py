from __future__ import annotations

from flask import Flask, session

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def api_login():
        data = json_body()
        user = container.auth_service.authenticate(str(data.get("username") or ""), str(data.get("password") or ""))

        session.clear()
        session.permanent = True
        session["user_id"] = user.user_id
        session["username"] = user.username
        return ok({"user_id": user.user_id, "username": user.username})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def api_logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @login_required
    def api_me():
        grants = container.access_policy.grants_for(current_user_id())
        return ok(
            {
                "user_id": current_user_id(),
                "username": session.get("username"),
                "admin": grants.is_admin,
                "permissions": sorted(p.value for p in grants.permissions),
                "camping_ids": sorted(grants.camping_ids),
            }
        )
