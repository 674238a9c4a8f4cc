from __future__ import annotations

from types import SimpleNamespace

import pytest

from src.teamops.teamops.common.http import SESSION_KEY
from src.teamops.teamops.contracts.esign import ESignSettings
from src.teamops.teamops.contracts.service import ContractService
from src.teamops.teamops.contracts.webhook import SIGNATURE_HEADER, sign
from src.teamops.teamops.main import create_app
from src.teamops.teamops.members.service import MemberService
from src.teamops.teamops.system_configs.service import SystemConfigService

WEBHOOK_SECRET = "hook-secret"


class InMemoryConfigs:
    def __init__(self):
        self.values = {"slack_bot_token": "xoxb-secret", "accounting_email": "keiri@example.com"}

    def get_all(self):
        return dict(self.values)

    def get_value(self, key):
        return self.values.get(key)

    def upsert_many(self, values, *, updated_by):
        self.values.update(values)


class TakenEmailMembers:
    def email_exists(self, email, *, exclude_member_id=None):
        return email == "taken@example.com"


class NoContracts:
    def find_by_envelope(self, envelope_id):
        return None


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    esign = SimpleNamespace(settings=ESignSettings(webhook_secret=WEBHOOK_SECRET))
    unused = object()
    container = SimpleNamespace(
        auth_service=unused,
        member_service=MemberService(TakenEmailMembers(), unused),
        tool_service=unused,
        skill_service=unused,
        attendance_service=unused,
        project_service=unused,
        schedule_service=unused,
        system_config_service=SystemConfigService(InMemoryConfigs()),
        notification_service=unused,
        invoice_service=unused,
        closing_service=unused,
        evaluation_service=unused,
        self_report_service=unused,
        pl_service=unused,
        contract_service=ContractService(NoContracts(), unused, esign),
    )
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user):
    with client.session_transaction() as sess:
        sess[SESSION_KEY] = user.to_session()


def test_missing_session_is_unauthorized(client):
    res = client.get("/api/system-configs")

    assert res.status_code == 401
    assert res.get_json()["error"]["code"] == "UNAUTHORIZED"


def test_member_is_forbidden_from_admin_route(client, member):
    _login(client, member)

    res = client.get("/api/system-configs")

    assert res.status_code == 403
    assert res.get_json() == {"error": {"code": "FORBIDDEN", "message": "権限がありません"}}


def test_member_is_forbidden_from_another_members_profile(client, member):
    _login(client, member)

    res = client.get("/api/members/4")

    assert res.status_code == 403
    assert res.get_json()["error"]["code"] == "FORBIDDEN"


def test_admin_reads_configs_with_secrets_blanked(client, admin):
    _login(client, admin)

    res = client.get("/api/system-configs")

    assert res.status_code == 200
    assert res.get_json() == {"slack_bot_token": "", "accounting_email": "keiri@example.com"}


def test_duplicate_email_is_conflict(client, manager):
    _login(client, manager)

    res = client.post(
        "/api/members",
        json={
            "name": "重複",
            "email": "Taken@Example.com",
            "password": "password123",
            "company": "boost",
            "role": "member",
            "status": "employee",
            "salaryType": "monthly",
            "salaryAmount": 250000,
            "joinedAt": "2026-04-01",
        },
    )

    assert res.status_code == 409
    assert res.get_json()["error"]["code"] == "CONFLICT"


def test_invalid_body_reports_field_details(client, manager):
    _login(client, manager)

    res = client.post("/api/members", json={"name": ""})

    assert res.status_code == 400
    error = res.get_json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {d["field"] for d in error["details"]} >= {"name", "email"}


def test_unknown_route_uses_error_shape(client):
    res = client.get("/api/nope")

    assert res.status_code == 404
    assert res.get_json()["error"]["code"] == "NOT_FOUND"


def test_wrong_method_keeps_status(client):
    res = client.delete("/api/system-configs")

    assert res.status_code == 405
    assert res.get_json()["error"]["code"] == "BAD_REQUEST"


def test_contract_creation_requires_member_type(client, admin):
    _login(client, admin)

    res = client.post("/api/contracts", json={"templateName": "契約"})

    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "BAD_REQUEST"


def test_webhook_needs_no_session_but_a_valid_signature(client):
    body = b'{"envelopeId": "env-1", "status": "completed"}'

    bad = client.post("/api/webhooks/docusign", data=body, headers={SIGNATURE_HEADER: "bad"})
    good = client.post(
        "/api/webhooks/docusign", data=body, headers={SIGNATURE_HEADER: sign(body, WEBHOOK_SECRET)}
    )

    assert bad.status_code == 401
    assert good.status_code == 200
    assert good.get_json() == {"ok": True}
