from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user, login_required, parse_body, query_int
from ..container import Container
from .schemas import PLAdjust, PLGenerate, PLUpsert


def register(app: Flask, container: Container) -> None:
    svc = container.pl_service

    @app.route("/api/pl-records", methods=["GET"], endpoint="pl_records_list")
    @login_required
    def list_records():
        months = request.args.get("months")
        return jsonify(
            svc.list(
                current_user(),
                month=request.args.get("month") or None,
                months=months.split(",") if months else None,
                project_id=query_int("projectId"),
            )
        )

    @app.route("/api/pl-records", methods=["PUT"], endpoint="pl_records_upsert")
    @login_required
    def upsert():
        return jsonify(svc.upsert(current_user(), parse_body(PLUpsert)))

    @app.route("/api/pl-records", methods=["PATCH"], endpoint="pl_records_adjust")
    @login_required
    def adjust():
        return jsonify(svc.adjust(current_user(), parse_body(PLAdjust)))

    @app.route("/api/pl-records/generate", methods=["POST"], endpoint="pl_records_generate")
    @login_required
    def generate():
        return jsonify(svc.generate(current_user(), parse_body(PLGenerate).targetMonth))
