from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, login_required, parse_body, query_int, query_month
from ..container import Container
from .schemas import ClockInRequest, ClockOutRequest, ConfirmRequest, CorrectionRequest


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendances/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    def clock_in():
        return jsonify(svc.clock_in(current_user(), parse_body(ClockInRequest)))

    @app.route("/api/attendances/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    def clock_out():
        return jsonify(svc.clock_out(current_user(), parse_body(ClockOutRequest)))

    @app.route("/api/attendances/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        return jsonify(svc.today(current_user()))

    @app.route("/api/attendances", methods=["GET"], endpoint="attendance_list")
    @login_required
    def list_month():
        return jsonify(
            svc.list_month(
                current_user(),
                member_id=query_int("memberId"),
                month=query_month(required=False),
            )
        )

    @app.route("/api/attendances/corrections", methods=["GET"], endpoint="attendance_corrections")
    @login_required
    def corrections():
        return jsonify(svc.corrections(current_user()))

    @app.route("/api/attendances/<int:attendance_id>", methods=["PUT"], endpoint="attendance_correct")
    @login_required
    def correct(attendance_id: int):
        return jsonify(svc.correct(current_user(), attendance_id, parse_body(CorrectionRequest)))

    @app.route("/api/attendances/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_confirm")
    @login_required
    def confirm(attendance_id: int):
        return jsonify(svc.confirm(current_user(), attendance_id, parse_body(ConfirmRequest)))
