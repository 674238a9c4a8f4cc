"""DocuSign eSignature REST client (JWT grant, template envelopes)."""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import requests
from jose import jwt

from ..core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

JWT_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_LIFETIME_SECONDS = 3600
DEFAULT_VOID_REASON = "管理者により無効化"


@dataclass(frozen=True)
class ESignSettings:
    account_id: Optional[str] = None
    integration_key: Optional[str] = None
    user_id: Optional[str] = None
    private_key_base64: Optional[str] = None
    base_url: str = "https://demo.docusign.net/restapi"
    oauth_host: str = "account-d.docusign.com"
    webhook_secret: Optional[str] = None
    signer_role_name: str = "Signer"

    @classmethod
    def from_dict(cls, data: dict) -> "ESignSettings":
        return cls(
            account_id=data.get("account_id") or None,
            integration_key=data.get("integration_key") or None,
            user_id=data.get("user_id") or None,
            private_key_base64=data.get("private_key_base64") or None,
            base_url=data.get("base_url") or cls.base_url,
            oauth_host=data.get("oauth_host") or cls.oauth_host,
            webhook_secret=data.get("webhook_secret") or None,
            signer_role_name=data.get("signer_role_name") or cls.signer_role_name,
        )

    @property
    def configured(self) -> bool:
        return all([self.account_id, self.integration_key, self.user_id, self.private_key_base64])


@dataclass(frozen=True)
class TextTab:
    label: str
    value: str


class ESignClient:
    def __init__(self, settings: ESignSettings, *, session: Optional[requests.Session] = None, timeout: float = 15.0):
        self._settings = settings
        self._session = session or requests.Session()
        self._timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    @property
    def settings(self) -> ESignSettings:
        return self._settings

    def _require_config(self) -> ESignSettings:
        if not self._settings.configured:
            raise ExternalServiceError("DocuSign 環境変数が設定されていません")
        return self._settings

    def _assertion(self, now: int) -> str:
        s = self._require_config()
        private_key = base64.b64decode(s.private_key_base64).decode("utf-8")
        claims = {
            "iss": s.integration_key,
            "sub": s.user_id,
            "aud": s.oauth_host,
            "iat": now,
            "exp": now + TOKEN_LIFETIME_SECONDS,
            "scope": "signature impersonation",
        }
        return jwt.encode(claims, private_key, algorithm="RS256")

    def access_token(self) -> str:
        now = time.time()
        if self._token and now < self._token_expires_at - 60:
            return self._token

        assertion = self._assertion(int(now))
        response = self._request(
            "POST",
            f"https://{self._settings.oauth_host}/oauth/token",
            data={"grant_type": JWT_GRANT_TYPE, "assertion": assertion},
            what="token",
            authorized=False,
        )
        data = response.json()
        self._token = data["access_token"]
        self._token_expires_at = now + int(data.get("expires_in", TOKEN_LIFETIME_SECONDS))
        return self._token

    def _account_url(self, path: str) -> str:
        s = self._require_config()
        return f"{s.base_url}/v2.1/accounts/{s.account_id}{path}"

    def _request(self, method: str, url: str, *, what: str, authorized: bool = True, **kwargs) -> requests.Response:
        headers = kwargs.pop("headers", {})
        if authorized:
            headers["Authorization"] = f"Bearer {self.access_token()}"
        try:
            response = self._session.request(method, url, headers=headers, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("docusign %s request failed: %s", what, e)
            raise ExternalServiceError(f"DocuSign {what} error: {e}")
        if not response.ok:
            logger.error("docusign %s error %s", what, response.status_code)
            raise ExternalServiceError(f"DocuSign {what} error: {response.status_code} {response.text}")
        return response

    def list_templates(self) -> list[dict]:
        response = self._request("GET", self._account_url("/templates"), what="getTemplates")
        templates = response.json().get("envelopeTemplates") or []
        return [{"templateId": t["templateId"], "name": t["name"]} for t in templates]

    def send_envelope(
        self, *, template_id: str, signer_email: str, signer_name: str, tabs: Sequence[TextTab] = ()
    ) -> str:
        """Create and send an envelope from a template; returns the envelope id."""
        body = {
            "status": "sent",
            "templateId": template_id,
            "templateRoles": [
                {
                    "roleName": self._settings.signer_role_name,
                    "email": signer_email,
                    "name": signer_name,
                    "tabs": {"textTabs": [{"tabLabel": t.label, "value": t.value} for t in tabs]},
                }
            ],
        }
        response = self._request("POST", self._account_url("/envelopes"), json=body, what="sendEnvelope")
        return response.json()["envelopeId"]

    def void_envelope(self, envelope_id: str, reason: str = DEFAULT_VOID_REASON) -> None:
        self._request(
            "PUT",
            self._account_url(f"/envelopes/{envelope_id}"),
            json={"status": "voided", "voidedReason": reason},
            what="voidEnvelope",
        )

    def download_document(self, envelope_id: str) -> bytes:
        """Combined signed PDF of an envelope."""
        response = self._request(
            "GET", self._account_url(f"/envelopes/{envelope_id}/documents/combined"), what="getDocument"
        )
        return response.content
