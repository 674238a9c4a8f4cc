from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, login_required, parse_body, query_int, query_month
from ..container import Container
from .schemas import EvaluationUpsert


def register(app: Flask, container: Container) -> None:
    svc = container.evaluation_service

    @app.route("/api/evaluations", methods=["GET"], endpoint="evaluations_monthly")
    @login_required
    def monthly():
        return jsonify(svc.monthly(current_user(), query_month()))

    @app.route("/api/evaluations", methods=["POST"], endpoint="evaluations_upsert")
    @login_required
    def upsert():
        data, created = svc.upsert(current_user(), parse_body(EvaluationUpsert))
        return jsonify(data), 201 if created else 200

    @app.route("/api/evaluations/<int:member_id>", methods=["GET"], endpoint="evaluations_history")
    @login_required
    def history(member_id: int):
        return jsonify(svc.history(current_user(), member_id, limit=query_int("limit")))
