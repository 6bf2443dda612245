from unittest.mock import MagicMock

import pytest
import requests

from mockhire.base.config import settings
from mockhire.utils.payment_gateway import PaymentGatewayClient, PaymentGatewayError, sanitize_customer_id


def response(status_code, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.text = text
    if body is None:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http):
    return PaymentGatewayClient(session=http)


def test_sanitize_customer_id():
    assert sanitize_customer_id("first.last+tag@mail.co.in") == "first_dot_last_tag_at_mail_dot_co_dot_in"


def test_create_order_sends_credentials(client, http):
    http.post.return_value = response(200, {"payment_session_id": "ps_1", "order_status": "ACTIVE"})

    data = client.create_order({"order_id": "o-1", "order_amount": 999.0})

    assert data["payment_session_id"] == "ps_1"
    headers = http.post.call_args.kwargs["headers"]
    assert headers["x-client-id"] == "test-app-id"
    assert headers["x-api-version"]


def test_provider_rejection_keeps_status(client, http):
    http.post.return_value = response(401, {"message": "authentication Failed"})
    with pytest.raises(PaymentGatewayError) as exc:
        client.create_order({"order_id": "o-1"})
    assert exc.value.status_code == 401
    assert exc.value.message == "authentication Failed"


def test_non_json_response(client, http):
    http.post.return_value = response(502, text="<html>Bad gateway</html>")
    with pytest.raises(PaymentGatewayError) as exc:
        client.create_order({"order_id": "o-1"})
    assert exc.value.status_code == 500


def test_missing_session_id(client, http):
    http.post.return_value = response(200, {"order_status": "ACTIVE"})
    with pytest.raises(PaymentGatewayError) as exc:
        client.create_order({"order_id": "o-1"})
    assert exc.value.message == "Missing payment session ID"


def test_transport_error(client, http):
    http.post.side_effect = requests.ConnectionError("refused")
    with pytest.raises(PaymentGatewayError) as exc:
        client.create_order({"order_id": "o-1"})
    assert exc.value.status_code == 502


def test_missing_credentials(client, http):
    client.secret_key = ""
    with pytest.raises(PaymentGatewayError) as exc:
        client.create_order({"order_id": "o-1"})
    assert exc.value.status_code == 500
    http.post.assert_not_called()


def test_production_mode_is_independent_of_environment(http, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "dev")
    monkeypatch.setattr(settings, "PAYMENT_MODE", "production")

    gateway = PaymentGatewayClient(session=http)

    assert gateway.test_mode is False
    assert gateway.base_url == settings.PAYMENT_PRODUCTION_URL


def test_test_mode_uses_sandbox(http, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "prod")
    monkeypatch.setattr(settings, "PAYMENT_MODE", "TEST")

    assert PaymentGatewayClient(session=http).base_url == settings.PAYMENT_SANDBOX_URL
