from __future__ import annotations

import base64
import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ContractStatus
from ..core.exceptions import ValidationError

SIGNATURE_HEADER = "X-DocuSign-Signature-1"

STATUS_MAP = {
    "sent": ContractStatus.SENT,
    "delivered": ContractStatus.WAITING_SIGN,
    "completed": ContractStatus.COMPLETED,
    "declined": ContractStatus.VOIDED,
    "voided": ContractStatus.VOIDED,
}


@dataclass(frozen=True)
class EnvelopeEvent:
    envelope_id: str
    status: Optional[ContractStatus]
    completed_at: Optional[datetime] = None


def sign(body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(body: bytes, header: Optional[str], secret: Optional[str]) -> bool:
    """Base64 HMAC-SHA256 of the raw body; always False without a secret."""
    if not secret or not header:
        return False
    return hmac.compare_digest(sign(body, secret), header)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("completedDateTime が不正です")


def parse_event(body: bytes) -> EnvelopeEvent:
    try:
        payload = json.loads(body)
    except ValueError:
        raise ValidationError("Invalid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON")

    envelope_id = payload.get("envelopeId")
    raw_status = payload.get("status")
    if not envelope_id or not raw_status:
        raise ValidationError("Missing envelopeId or status")

    status = STATUS_MAP.get(str(raw_status).lower())
    completed_at = _parse_datetime(payload.get("completedDateTime")) if status is ContractStatus.COMPLETED else None
    return EnvelopeEvent(envelope_id=str(envelope_id), status=status, completed_at=completed_at)
