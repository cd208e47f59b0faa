"""Minimal WhatsApp Cloud API client for customer order notifications."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, cast
from uuid import uuid4

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class WhatsAppError(RuntimeError):
    """Raised when the WhatsApp Cloud API responds with an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        error_type: str | None = None,
        error_body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.error_body = error_body


class WhatsAppClient:
    """Thin client for the Graph API messaging endpoints of one sender number."""

    def __init__(
        self,
        *,
        access_token: str | SecretStr,
        phone_number_id: str,
        base_url: str = "https://graph.facebook.com/v17.0",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = (
            access_token.get_secret_value() if isinstance(access_token, SecretStr) else access_token
        )
        if not secret_value:
            raise ValueError("WhatsApp access token must be provided")
        if not phone_number_id:
            raise ValueError("WhatsApp phone number id must be provided")

        self._access_token = secret_value
        self._phone_number_id = phone_number_id
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def upload_media(self, path: Path | str, *, mime_type: str = "application/pdf") -> str:
        """Upload a file and return the media id to reference in a message."""

        file_path = Path(path)
        payload = self.request(
            "POST",
            f"/{self._phone_number_id}/media",
            data={"messaging_product": "whatsapp", "type": mime_type},
            files={"file": (file_path.name, file_path.read_bytes(), mime_type)},
        )
        media_id = payload.get("id")
        if not media_id:
            raise WhatsAppError("Media upload returned no id", error_body=payload)
        return str(media_id)

    def send_template(
        self,
        to: str,
        template_name: str,
        *,
        language: str = "en_US",
        components: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Send a pre-approved message template to an E.164 recipient."""

        template: Dict[str, Any] = {"name": template_name, "language": {"code": language}}
        if components:
            template["components"] = components
        body = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "template",
            "template": template,
        }
        return self.request("POST", f"/{self._phone_number_id}/messages", json_body=body)

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
        data: Dict[str, Any] | None = None,
        files: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Perform a raw Graph API request and return the parsed JSON payload."""

        url = f"{self._base_url}{path}"
        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Accept": "application/json",
            },
        ) as client:
            request = client.build_request(method, url, json=json_body, data=data, files=files)
            logger.debug(
                "WhatsAppClient request",
                extra={"evt": "whatsapp_request", "method": request.method, "path": path},
            )
            try:
                response = client.send(request)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                error_payload: Any | None = None
                error_type: str | None = None
                try:
                    error_payload = exc.response.json()
                    if isinstance(error_payload, dict):
                        error = error_payload.get("error")
                        if isinstance(error, dict):
                            error_type = error.get("type") or error.get("code")
                except json.JSONDecodeError:
                    error_payload = exc.response.text

                logger.error(
                    "WhatsApp API error %s for %s %s: %s",
                    status,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise WhatsAppError(
                    message=f"WhatsApp API responded with status {status}",
                    status_code=status,
                    error_type=str(error_type) if error_type is not None else None,
                    error_body=error_payload,
                ) from exc
            except httpx.RequestError as exc:
                logger.error("WhatsApp request failure for %s %s: %s", method, path, str(exc))
                raise WhatsAppError("Failed to reach WhatsApp API") from exc

        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from WhatsApp for %s %s", method, path)
            raise WhatsAppError("Received malformed JSON from WhatsApp") from exc

        if not isinstance(payload, dict):
            logger.error("Unexpected response shape from WhatsApp for %s %s", method, path)
            raise WhatsAppError(
                "Unexpected response shape from WhatsApp",
                status_code=response.status_code,
                error_body=payload,
            )
        return cast(Dict[str, Any], payload)


class FakeWhatsAppClient(WhatsAppClient):
    """In-memory stand-in that records what would have been sent."""

    def __init__(self, *, fail_with: Optional[WhatsAppError] = None) -> None:
        super().__init__(access_token="fake-whatsapp-token", phone_number_id="000000000000")
        self.fail_with = fail_with
        self.uploads: List[Path] = []
        self.messages: List[Dict[str, Any]] = []
        self._logger = logging.getLogger(self.__class__.__name__)

    def upload_media(self, path: Path | str, *, mime_type: str = "application/pdf") -> str:
        if self.fail_with is not None:
            raise self.fail_with
        self.uploads.append(Path(path))
        media_id = f"fake-media-{uuid4().hex}"
        self._logger.debug("Fake media uploaded", extra={"media_id": media_id})
        return media_id

    def send_template(
        self,
        to: str,
        template_name: str,
        *,
        language: str = "en_US",
        components: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        if self.fail_with is not None:
            raise self.fail_with
        message = {
            "to": to,
            "template": template_name,
            "language": language,
            "components": components or [],
        }
        self.messages.append(message)
        return {
            "messaging_product": "whatsapp",
            "contacts": [{"input": to, "wa_id": to.lstrip("+")}],
            "messages": [{"id": f"wamid.fake-{uuid4().hex}"}],
        }
