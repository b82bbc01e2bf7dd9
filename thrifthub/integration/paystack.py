import hashlib
import hmac
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from thrifthub.configuration.settings import Configuration
from thrifthub.core.exceptions.app_exception import GatewayException

configuration = Configuration()


class PaystackError(GatewayException):
    def __init__(self, detail: str):
        super().__init__(detail=detail)


def to_pesewas(amount) -> int:
    """Paystack takes amounts in the minor unit."""
    return int((Decimal(str(amount)) * 100).to_integral_value())


def from_pesewas(amount: int) -> Decimal:
    return (Decimal(int(amount)) / 100).quantize(Decimal("0.01"))


class PaystackClient:
    """
    Thin synchronous wrapper over the Paystack transaction API.

    Every call returns the decoded `data` object of the gateway response and
    raises `PaystackError` when the gateway answers with an error status, an
    unsuccessful `status` flag, or cannot be reached.
    """

    def __init__(self, secret_key: Optional[str] = None, base_url: Optional[str] = None, transport: Optional[httpx.BaseTransport] = None):
        self.secret_key = secret_key if secret_key is not None else configuration.paystack_secret_key
        self.base_url = (base_url or configuration.paystack_base_url).rstrip("/")
        self.callback_url = f"{configuration.base_url}/payment/verify"
        self.transport = transport

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.secret_key}", "Content-Type": "application/json"}
        try:
            with httpx.Client(base_url=self.base_url, transport=self.transport, timeout=30.0) as client:
                response = client.request(method, path, json=payload, headers=headers)
                response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            message = self._error_message(e.response)
            logging.error(f"PAYSTACK >>> {method} {path} failed with {e.response.status_code}: {message}")
            raise PaystackError(f"Paystack request failed: {message}")
        except httpx.RequestError as e:
            logging.error(f"PAYSTACK >>> Could not reach Paystack on {path}: {e}")
            raise PaystackError(f"Paystack unavailable: {e}")

        if not body.get("status"):
            raise PaystackError(f"Paystack request failed: {body.get('message', 'unknown error')}")
        return body.get("data") or {}

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json().get("message") or response.reason_phrase
        except ValueError:
            return response.reason_phrase

    def initialize_transaction(
        self,
        email: str,
        amount: Decimal,
        reference: str,
        metadata: Optional[Dict[str, Any]] = None,
        channels: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Opens a checkout session.

        Returns:
            dict: `authorization_url`, `access_code` and `reference`.
        """
        payload = {
            "email": email,
            "amount": to_pesewas(amount),
            "currency": "GHS",
            "reference": reference,
            "callback_url": self.callback_url,
            "metadata": metadata or {},
            "channels": channels or ["card", "mobile_money"],
        }
        logging.info(f"PAYSTACK >>> Initializing {reference} for {amount}")
        return self._request("POST", "/transaction/initialize", payload)

    def charge_authorization(self, authorization_code: str, email: str, amount: Decimal, reference: str) -> Dict[str, Any]:
        """Charges a reusable authorization saved from an earlier payment."""
        payload = {
            "authorization_code": authorization_code,
            "email": email,
            "amount": to_pesewas(amount),
            "currency": "GHS",
            "reference": reference,
        }
        logging.info(f"PAYSTACK >>> Charging authorization for {reference}")
        return self._request("POST", "/transaction/charge_authorization", payload)

    def verify_transaction(self, reference: str) -> Dict[str, Any]:
        return self._request("GET", f"/transaction/verify/{reference}")

    def verify_signature(self, payload: bytes, signature: Optional[str]) -> bool:
        if not signature:
            return False
        expected = hmac.new(self.secret_key.encode(), payload, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature)


def get_paystack() -> PaystackClient:
    return PaystackClient()
