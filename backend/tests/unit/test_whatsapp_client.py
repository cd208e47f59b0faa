# backend/tests/unit/test_whatsapp_client.py
import json

import httpx
from pydantic import SecretStr
import pytest

from app.integrations.whatsapp_client import WhatsAppClient, WhatsAppError


def _client(handler) -> WhatsAppClient:
    return WhatsAppClient(
        access_token=SecretStr("secret-token"),
        phone_number_id="1234567890",
        base_url="https://graph.test/v17.0/",
        transport=httpx.MockTransport(handler),
    )


def test_requires_credentials():
    with pytest.raises(ValueError):
        WhatsAppClient(access_token="", phone_number_id="123")
    with pytest.raises(ValueError):
        WhatsAppClient(access_token="token", phone_number_id="")


def test_send_template_posts_message():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"messages": [{"id": "wamid.123"}]})

    payload = _client(handler).send_template(
        "+919876543210",
        "order_status_update",
        language="en_US",
        components=[{"type": "body", "parameters": []}],
    )

    assert payload["messages"][0]["id"] == "wamid.123"
    assert seen["url"] == "https://graph.test/v17.0/1234567890/messages"
    assert seen["auth"] == "Bearer secret-token"
    assert seen["body"] == {
        "messaging_product": "whatsapp",
        "to": "+919876543210",
        "type": "template",
        "template": {
            "name": "order_status_update",
            "language": {"code": "en_US"},
            "components": [{"type": "body", "parameters": []}],
        },
    }


def test_upload_media_returns_id(tmp_path):
    pdf = tmp_path / "anitha_r-ORD-1.pdf"
    pdf.write_bytes(b"%PDF-1.4 body")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.read()
        return httpx.Response(200, json={"id": "media-42"})

    media_id = _client(handler).upload_media(pdf, mime_type="application/pdf")

    assert media_id == "media-42"
    assert seen["url"].endswith("/1234567890/media")
    assert seen["content_type"].startswith("multipart/form-data")
    assert b"anitha_r-ORD-1.pdf" in seen["body"]
    assert b"%PDF-1.4 body" in seen["body"]


def test_upload_without_id_is_an_error(tmp_path):
    pdf = tmp_path / "x.pdf"
    pdf.write_bytes(b"%PDF")

    client = _client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(WhatsAppError, match="no id"):
        client.upload_media(pdf)


def test_http_error_carries_provider_details():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": {"message": "Invalid parameter", "type": "OAuthException", "code": 100}},
        )

    with pytest.raises(WhatsAppError) as exc_info:
        _client(handler).send_template("+919876543210", "t")

    assert exc_info.value.status_code == 400
    assert exc_info.value.error_type == "OAuthException"
    assert exc_info.value.error_body["error"]["code"] == 100


def test_http_error_with_code_only():
    client = _client(lambda request: httpx.Response(500, json={"error": {"code": 131000}}))

    with pytest.raises(WhatsAppError) as exc_info:
        client.send_template("+919876543210", "t")

    assert exc_info.value.error_type == "131000"


def test_unreachable_provider():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(WhatsAppError, match="Failed to reach"):
        _client(handler).send_template("+919876543210", "t")


def test_malformed_json():
    client = _client(lambda request: httpx.Response(200, content=b"not json"))

    with pytest.raises(WhatsAppError, match="malformed"):
        client.send_template("+919876543210", "t")


@pytest.mark.parametrize("body", [["x"], "ok", 7])
def test_non_object_success_body_is_an_error(body):
    client = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(WhatsAppError, match="Unexpected response shape") as exc_info:
        client.send_template("+919876543210", "t")

    assert exc_info.value.status_code == 200
    assert exc_info.value.error_body == body
