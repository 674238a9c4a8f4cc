from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user, login_required, parse_body
from ..container import Container
from .schemas import ConfigUpdate


def register(app: Flask, container: Container) -> None:
    svc = container.system_config_service

    @app.route("/api/system-configs", methods=["GET"], endpoint="system_configs_get")
    @login_required
    def get_configs():
        return jsonify(svc.get_all(current_user()))

    @app.route("/api/system-configs", methods=["PUT"], endpoint="system_configs_put")
    @login_required
    def put_configs():
        return jsonify(svc.put(current_user(), parse_body(ConfigUpdate)))
