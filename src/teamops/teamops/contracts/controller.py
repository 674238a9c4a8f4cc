from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import current_user, json_body, login_required, parse_body, query_int
from ..container import Container
from ..core.enums import ContractStatus
from ..core.exceptions import DomainError, ValidationError
from .schemas import ContractDraft, ContractVoid, ExistingMemberContract, NewMemberContract
from .service import PDF_MIMETYPE
from .webhook import SIGNATURE_HEADER


def register(app: Flask, container: Container) -> None:
    svc = container.contract_service

    @app.route("/api/members/<int:member_id>/contracts", methods=["GET"], endpoint="contracts_for_member")
    @login_required
    def list_for_member(member_id: int):
        return jsonify(svc.list_for_member(current_user(), member_id))

    @app.route("/api/members/<int:member_id>/contracts", methods=["POST"], endpoint="contracts_create_draft")
    @login_required
    def create_draft(member_id: int):
        return jsonify(svc.create_draft(current_user(), member_id, parse_body(ContractDraft))), 201

    @app.route(
        "/api/members/<int:member_id>/contracts/<int:contract_id>/send", methods=["POST"], endpoint="contracts_send"
    )
    @login_required
    def send(member_id: int, contract_id: int):
        return jsonify(svc.send(current_user(), member_id, contract_id))

    @app.route(
        "/api/members/<int:member_id>/contracts/<int:contract_id>/void", methods=["PUT"], endpoint="contracts_void"
    )
    @login_required
    def void(member_id: int, contract_id: int):
        data = request.get_json(silent=True) or {}
        payload = parse_body(ContractVoid, data)
        return jsonify(svc.void(current_user(), member_id, contract_id, payload.reason))

    @app.route(
        "/api/members/<int:member_id>/contracts/<int:contract_id>/download-url",
        methods=["GET"],
        endpoint="contracts_download_url",
    )
    @login_required
    def download_url(member_id: int, contract_id: int):
        return jsonify(svc.download_url(current_user(), member_id, contract_id))

    @app.route(
        "/api/members/<int:member_id>/contracts/<int:contract_id>/document",
        methods=["GET"],
        endpoint="contracts_document",
    )
    @login_required
    def document(member_id: int, contract_id: int):
        filename, content = svc.document(current_user(), member_id, contract_id)
        return send_file(io.BytesIO(content), download_name=filename, as_attachment=True, mimetype=PDF_MIMETYPE)

    @app.route("/api/contracts", methods=["GET"], endpoint="contracts_list")
    @login_required
    def list_all():
        status = request.args.get("status") or None
        try:
            status = ContractStatus(status) if status else None
        except ValueError:
            raise ValidationError("status が不正です")
        return jsonify(svc.list_all(current_user(), member_id=query_int("memberId"), status=status))

    @app.route("/api/contracts", methods=["POST"], endpoint="contracts_create")
    @login_required
    def create():
        data = json_body()
        member_type = data.get("memberType")
        if member_type == "new":
            payload = parse_body(NewMemberContract, data)
        elif member_type == "existing":
            payload = parse_body(ExistingMemberContract, data)
        else:
            raise DomainError("memberType は必須です")
        return jsonify(svc.create(current_user(), payload)), 201

    @app.route("/api/contracts/templates", methods=["GET"], endpoint="contracts_templates")
    @login_required
    def templates():
        return jsonify(svc.templates(current_user()))

    @app.route("/api/webhooks/docusign", methods=["POST"], endpoint="contracts_webhook")
    def docusign_webhook():
        return jsonify(svc.handle_webhook(request.get_data(), request.headers.get(SIGNATURE_HEADER)))
