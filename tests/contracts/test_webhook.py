from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from src.teamops.teamops.contracts.webhook import parse_event, sign, verify_signature
from src.teamops.teamops.core.enums import ContractStatus
from src.teamops.teamops.core.exceptions import ValidationError

SECRET = "s3cret"


def _body(**payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_signature_roundtrip_and_tamper_detection():
    body = _body(envelopeId="env-1", status="completed")
    header = sign(body, SECRET)

    assert verify_signature(body, header, SECRET)
    assert not verify_signature(body + b" ", header, SECRET)
    assert not verify_signature(body, header, "other")


def test_missing_secret_or_header_never_verifies():
    body = _body(envelopeId="env-1", status="sent")
    assert not verify_signature(body, sign(body, SECRET), None)
    assert not verify_signature(body, None, SECRET)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("sent", ContractStatus.SENT),
        ("Delivered", ContractStatus.WAITING_SIGN),
        ("completed", ContractStatus.COMPLETED),
        ("declined", ContractStatus.VOIDED),
        ("VOIDED", ContractStatus.VOIDED),
        ("created", None),
    ],
)
def test_status_mapping(raw, expected):
    assert parse_event(_body(envelopeId="env-1", status=raw)).status is expected


def test_completed_event_carries_completion_time():
    event = parse_event(_body(envelopeId="env-1", status="completed", completedDateTime="2026-04-10T03:00:00Z"))

    assert event.completed_at == datetime(2026, 4, 10, 3, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("body", [b"not json", b"[]", _body(status="sent"), _body(envelopeId="env-1")])
def test_malformed_payloads_are_rejected(body):
    with pytest.raises(ValidationError):
        parse_event(body)
