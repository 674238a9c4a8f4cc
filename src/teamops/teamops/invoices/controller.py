from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import current_user, login_required, parse_body, query_month
from ..container import Container
from .schemas import InvoiceCreate, InvoiceGenerate


def register(app: Flask, container: Container) -> None:
    svc = container.invoice_service

    @app.route("/api/invoices", methods=["GET"], endpoint="invoices_list")
    @login_required
    def list_invoices():
        mine = request.args.get("mine") == "1"
        return jsonify(svc.list(current_user(), query_month(), mine=mine))

    @app.route("/api/invoices", methods=["POST"], endpoint="invoices_create")
    @login_required
    def create_invoice():
        return jsonify(svc.create(current_user(), parse_body(InvoiceCreate))), 201

    @app.route("/api/invoices/generate", methods=["POST"], endpoint="invoices_generate")
    @login_required
    def generate_invoice():
        file = svc.generate(current_user(), parse_body(InvoiceGenerate))
        return send_file(
            io.BytesIO(file.content),
            download_name=file.filename,
            as_attachment=True,
            mimetype=file.mimetype,
        )

    @app.route("/api/invoices/<int:invoice_id>/accounting", methods=["PATCH"], endpoint="invoices_accounting")
    @login_required
    def send_to_accounting(invoice_id: int):
        return jsonify(svc.send_to_accounting(current_user(), invoice_id))
