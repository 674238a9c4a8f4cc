from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user, login_required, parse_body
from ..common.validators import require_date
from ..container import Container
from ..core.exceptions import ValidationError
from .schemas import ScheduleBatch


def register(app: Flask, container: Container) -> None:
    svc = container.schedule_service

    def _optional_date(name: str):
        value = request.args.get(name)
        return require_date(value, name) if value else None

    @app.route("/api/members/<int:member_id>/work-schedules", methods=["GET"], endpoint="schedules_list")
    @login_required
    def list_schedules(member_id: int):
        return jsonify(
            svc.list_for_member(
                current_user(), member_id, start=_optional_date("from"), end=_optional_date("to")
            )
        )

    @app.route("/api/members/<int:member_id>/work-schedules", methods=["POST"], endpoint="schedules_upsert")
    @login_required
    def upsert_schedules(member_id: int):
        data = request.get_json(silent=True)
        if not isinstance(data, list):
            raise ValidationError("配列形式で送信してください")
        return jsonify(svc.bulk_upsert(current_user(), member_id, parse_body(ScheduleBatch, data)))

    @app.route("/api/calendar", methods=["GET"], endpoint="calendar")
    @login_required
    def calendar():
        start = require_date(request.args.get("from"), "from")
        end = require_date(request.args.get("to"), "to")
        return jsonify(svc.calendar(current_user(), start=start, end=end))

    @app.route("/api/schedules/unsubmitted", methods=["GET"], endpoint="schedules_unsubmitted")
    @login_required
    def unsubmitted():
        return jsonify(svc.unsubmitted(current_user()))

    @app.route("/api/schedules/unsubmitted/notify", methods=["POST"], endpoint="schedules_unsubmitted_notify")
    @login_required
    def notify_unsubmitted():
        return jsonify(svc.notify_unsubmitted(current_user()))
