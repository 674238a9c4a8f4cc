from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, login_required, parse_body, query_month
from ..container import Container
from .schemas import SelfReportSubmit


def register(app: Flask, container: Container) -> None:
    svc = container.self_report_service

    @app.route("/api/self-reports", methods=["GET"], endpoint="self_reports_monthly")
    @login_required
    def monthly():
        return jsonify(svc.monthly(current_user(), query_month()))

    @app.route("/api/self-reports", methods=["POST"], endpoint="self_reports_submit")
    @login_required
    def submit():
        return jsonify(svc.submit(current_user(), parse_body(SelfReportSubmit))), 201
