from __future__ import annotations

import io

from flask import Flask, jsonify, send_file

from ..common.http import current_user, json_body, login_required, query_month
from ..common.validators import require_month
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.closing_service

    @app.route("/api/closing", methods=["GET"], endpoint="closing_summary")
    @login_required
    def summary():
        return jsonify(svc.summary(current_user(), query_month()))

    @app.route("/api/closing/members/<int:member_id>/notify", methods=["PATCH"], endpoint="closing_notify")
    @login_required
    def notify(member_id: int):
        month = require_month(json_body().get("month"))
        return jsonify(svc.notify(current_user(), member_id, month))

    @app.route("/api/closing/export", methods=["GET"], endpoint="closing_export")
    @login_required
    def export():
        file = svc.export(current_user(), query_month())
        return send_file(
            io.BytesIO(file.content),
            download_name=file.filename,
            as_attachment=True,
            mimetype=file.mimetype,
        )
