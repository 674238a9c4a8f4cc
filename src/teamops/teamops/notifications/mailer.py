from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Sequence


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    maintype: str = "application"
    subtype: str = "octet-stream"


@dataclass(frozen=True)
class SMTPSettings:
    host: Optional[str]
    port: int = 587
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SMTPSettings":
        return cls(
            host=data.get("host") or None,
            port=int(data.get("port") or 587),
            secure=bool(data.get("secure", False)),
            user=data.get("user") or None,
            password=data.get("password") or None,
            sender=data.get("from") or data.get("user") or None,
        )


class Mailer:
    """SMTP mail sender; sending is skipped when no SMTP host is configured."""

    def __init__(self, settings: SMTPSettings):
        self._settings = settings

    @property
    def configured(self) -> bool:
        return bool(self._settings.host)

    def send(self, *, to: str, subject: str, body: str, attachments: Sequence[Attachment] = ()) -> bool:
        if not self.configured:
            logger.debug("SMTP not configured, skipping mail to %s", to)
            return False

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._settings.sender or ""
        msg["To"] = to
        msg.set_content(body)
        for att in attachments:
            msg.add_attachment(att.content, maintype=att.maintype, subtype=att.subtype, filename=att.filename)

        smtp_cls = smtplib.SMTP_SSL if self._settings.secure else smtplib.SMTP
        with smtp_cls(self._settings.host, self._settings.port, timeout=30) as smtp:
            if not self._settings.secure:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls()
                    smtp.ehlo()
            if self._settings.user:
                smtp.login(self._settings.user, self._settings.password or "")
            smtp.send_message(msg)

        logger.info("mail sent to %s: %s", to, subject)
        return True
