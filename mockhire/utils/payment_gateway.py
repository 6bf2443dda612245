import logging
import re
from typing import Any, Dict, Optional

import requests

from mockhire.base.config import settings

logger = logging.getLogger("payment_gateway")


class PaymentGatewayError(Exception):
    """Provider rejected the request or answered with something unusable."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def sanitize_customer_id(email: str) -> str:
    """Provider customer ids allow only [A-Za-z0-9_-]."""
    return re.sub(r"[^a-zA-Z0-9_-]", "_", email.replace("@", "_at_").replace(".", "_dot_"))


class PaymentGatewayClient:
    """Thin client for the hosted-checkout order API (sandbox or production)."""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.test_mode = settings.PAYMENT_TEST_MODE
        if self.test_mode:
            self.base_url = settings.PAYMENT_SANDBOX_URL
            self.app_id = settings.PAYMENT_TEST_APP_ID
            self.secret_key = settings.PAYMENT_TEST_SECRET_KEY
        else:
            self.base_url = settings.PAYMENT_PRODUCTION_URL
            self.app_id = settings.PAYMENT_PROD_APP_ID
            self.secret_key = settings.PAYMENT_PROD_SECRET_KEY

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-client-id": self.app_id,
            "x-client-secret": self.secret_key,
            "x-api-version": settings.PAYMENT_API_VERSION,
        }

    def create_order(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.app_id or not self.secret_key:
            logger.error("[Gateway] Missing payment provider credentials")
            raise PaymentGatewayError(500, "Missing payment provider credentials")

        logger.info(
            f"[Gateway] Creating order {payload.get('order_id')} "
            f"({'TEST' if self.test_mode else 'PRODUCTION'}) amount={payload.get('order_amount')}"
        )
        try:
            response = self.session.post(
                self.base_url,
                json=payload,
                headers=self._headers(),
                timeout=settings.PAYMENT_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"[Gateway] Transport error: {e}")
            raise PaymentGatewayError(502, f"Payment service unreachable: {e}")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"[Gateway] Non-JSON response ({response.status_code}): {response.text[:200]}")
            raise PaymentGatewayError(500, "Failed to parse payment service response")

        if not response.ok:
            message = data.get("message") or data.get("error_description") or "Payment service error"
            logger.error(f"[Gateway] Order rejected ({response.status_code}): {message}")
            raise PaymentGatewayError(response.status_code, message)

        if not data.get("payment_session_id"):
            logger.error(f"[Gateway] Missing payment_session_id in response: {data}")
            raise PaymentGatewayError(500, "Missing payment session ID")

        return data
