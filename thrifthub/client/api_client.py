import logging
from typing import Any, Optional
import httpx


class ApiError(Exception):
    """Non-OK answer from the ThriftHub API, unpacked from the error envelope."""

    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        return cls(
            status_code=response.status_code,
            code=error.get("code", "HTTP_ERROR"),
            message=error.get("message", response.reason_phrase or "Request failed"),
        )


class ApiClient:
    """
    Thin synchronous wrapper over the HTTP API.

    Every call returns the `data` member of the response envelope; non-OK
    answers raise `ApiError`. Pass `transport` (e.g. `httpx.MockTransport`) or
    a ready `http_client` to talk to something other than the network.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        access_token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.access_token = access_token
        self._client = http_client or httpx.Client(base_url=base_url, transport=transport, timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def _headers(self) -> dict:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    def request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> Any:
        try:
            response = self._client.request(method, path, json=json, params=params, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error = ApiError.from_response(e.response)
            logging.warning(f"CLIENT >>> {method} {path} failed: {error}")
            raise error from e
        except httpx.RequestError as e:
            logging.error(f"CLIENT >>> {method} {path} could not reach the API: {e}")
            raise ApiError(0, "NETWORK_ERROR", str(e)) from e

        body = response.json()
        if not body.get("success", False):
            error = body.get("error") or {}
            raise ApiError(response.status_code, error.get("code", "UNKNOWN_ERROR"), error.get("message", "Request failed"))
        return body.get("data")

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    # Endpoints used by the client helpers

    def login(self, email: str, password: str) -> dict:
        token = self.post("/auth/login", {"email": email, "password": password})
        self.access_token = token["access_token"]
        return token

    def get_tracking(self, order_id: int) -> dict:
        return self.get(f"/deliveries/track/{order_id}")

    def update_order_status(self, order_id: int, status: str) -> dict:
        return self.patch(f"/admin/orders/{order_id}/status", {"status": status})

    def set_rider_availability(self, rider_id: int, is_available: bool) -> dict:
        return self.patch(f"/admin/riders/{rider_id}/availability", {"is_available": is_available})

    def get_cart(self) -> dict:
        return self.get("/cart")

    def update_cart_item(self, item_id: int, quantity: int) -> dict:
        return self.patch(f"/cart/items/{item_id}", {"quantity": quantity})
