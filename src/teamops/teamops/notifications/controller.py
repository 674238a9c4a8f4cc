from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    notifications = container.notification_service

    @app.route("/api/slack/test", methods=["POST"], endpoint="slack_test")
    @login_required
    def slack_test():
        return jsonify({"ok": notifications.send_test_message(current_user())})
