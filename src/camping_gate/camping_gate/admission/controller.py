from __future__ import annotations

from flask import Flask, request
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from ..common.web import ok, permission_required
from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    can_scan = permission_required(container.access_policy, Permission.READ_QR, Permission.READ_AFFILIATES)

    @app.route("/api/qr/dni/<dni>", methods=["GET"], endpoint="api_resolve_dni")
    @can_scan
    def api_resolve_dni(dni: str):
        if not 6 <= len(dni.strip()) <= 20:
            raise ValidationError("dni must be 6 to 20 characters")
        result = container.admission_resolver.resolve_by_document(dni.strip())
        return ok(result.to_dict())

    @app.route("/api/qr/<code>", methods=["GET"], endpoint="api_resolve_qr")
    @can_scan
    def api_resolve_qr(code: str):
        if not 3 <= len(code.strip()) <= 255:
            raise ValidationError("qr code must be 3 to 255 characters")
        result = container.admission_resolver.resolve_by_qr(code.strip())
        return ok(result.to_dict())

    @app.route("/api/qr/scan", methods=["POST"], endpoint="api_resolve_qr_image")
    @can_scan
    def api_resolve_qr_image():
        """Accept a photo of a credential, decode its QR code and resolve it."""
        if "image" not in request.files:
            raise ValidationError("Missing image file")

        try:
            img = Image.open(request.files["image"].stream).convert("RGB")
        except OSError:
            raise ValidationError("Unreadable image file")

        decoded = pyzbar_decode(img)
        if not decoded:
            raise ValidationError("No QR code found in image")

        scanned_code = decoded[0].data.decode("utf-8").strip()
        result = container.admission_resolver.resolve_by_qr(scanned_code)
        return ok(result.to_dict())
