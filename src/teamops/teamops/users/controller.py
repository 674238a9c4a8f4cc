from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import current_user, json_body, login_required, store_session
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = json_body()
        user = container.auth_service.authenticate(str(body.get("email", "")), str(body.get("password", "")))
        store_session(user)
        return jsonify({"user": user.to_session()})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return jsonify({"ok": True})

    @app.route("/api/auth/session", methods=["GET"], endpoint="auth_session")
    @login_required
    def current_session():
        return jsonify({"user": current_user().to_session()})

    @app.route("/api/members/<int:member_id>/profile/password", methods=["POST"], endpoint="member_password")
    @login_required
    def change_password(member_id: int):
        body = json_body()
        container.auth_service.change_password(
            current_user(),
            member_id=member_id,
            current_password=str(body.get("currentPassword", "")),
            new_password=str(body.get("newPassword", "")),
        )
        return jsonify({"ok": True})
