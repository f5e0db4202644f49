from __future__ import annotations

import io

from flask import Flask, send_file

from ..common.web import ok, permission_required
from ..container import Container
from ..core.enums import Permission


def register(app: Flask, container: Container) -> None:
    can_read = permission_required(container.access_policy, Permission.READ_AFFILIATES, Permission.READ_QR)

    @app.route("/api/personas/<int:person_id>", methods=["GET"], endpoint="api_person_detail")
    @can_read
    def api_person_detail(person_id: int):
        detail = container.person_service.get_detail(person_id)
        p = detail.person
        return ok(
            {
                "id": p.person_id,
                "dni": p.document_number,
                "full_name": p.full_name,
                "qr_code": p.qr_code,
                "affiliate_id": detail.affiliate.affiliate_id if detail.affiliate else None,
                "guest_id": detail.guest.guest_id if detail.guest else None,
                "family_of": [f.affiliate_id for f in detail.family_links],
                "family_group": [
                    {"person_id": m.person_id, "dni": m.document_number, "full_name": m.full_name}
                    for m in detail.family_group
                ],
            }
        )

    @app.route("/api/personas/<int:person_id>/qr.png", methods=["GET"], endpoint="api_person_qr")
    @can_read
    def api_person_qr(person_id: int):
        png = container.person_service.render_qr_png(person_id)
        return send_file(io.BytesIO(png), mimetype="image/png")
