"""
Booking API client

Thin ``requests`` wrapper used by every service that talks to the hotel
backend: base URL, bearer token, timeout, and one place where transport
errors and the ``{success, data}`` envelope are dealt with.
"""

import logging
from typing import Any, Callable, Optional

import requests
from django.conf import settings

from shared.domain.exceptions import BookingPipelineError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:4000/api/v1"
DEFAULT_TIMEOUT = 10


class ApiError(BookingPipelineError):
    """Transport-level failure talking to the booking API."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class MalformedResponseError(ApiError):
    """The API answered, but not with the shape we expect."""


def unwrap_envelope(body: Any) -> Any:
    """
    Strip the ``{success, data, message}`` envelope

    Bare payloads (lists, objects without ``success``) are returned as-is.
    """
    if isinstance(body, dict) and "success" in body:
        if body.get("success") is False:
            message = body.get("message") or body.get("error") or "Request was not successful"
            if isinstance(message, list):
                message = "; ".join(str(m) for m in message)
            raise ApiError(str(message), payload=body)
        return body.get("data")
    return body


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, list):
            return "; ".join(str(m) for m in message)
        if message:
            return str(message)
    return response.reason


class BookingApiClient:
    """
    JSON-over-HTTPS client for the booking backend

    Args:
        base_url: API root, e.g. ``https://api.example.com/api/v1``
        token: static bearer token
        token_provider: callable returning the current token (wins over token)
        timeout: per-request timeout in seconds
        session: pre-built ``requests.Session`` (tests, connection pooling)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or getattr(settings, "BOOKING_API_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self._token = token if token is not None else getattr(settings, "BOOKING_API_TOKEN", "")
        self._token_provider = token_provider
        self.timeout = timeout or getattr(settings, "BOOKING_API_TIMEOUT", DEFAULT_TIMEOUT)
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        token = self._token_provider() if self._token_provider else self._token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> Any:
        url = self._url(path)
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            message = _error_message(e.response) if e.response is not None else str(e)
            logger.warning(f"{method} {url} failed with HTTP {status_code}: {message}")
            raise ApiError(message, status_code=status_code) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Network error on {method} {url}: {e}")
            raise ApiError(f"Connection error: {e}") from e

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{method} {url} returned non-JSON body",
                status_code=response.status_code,
            ) from e
        return unwrap_envelope(body)

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[dict] = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[dict] = None) -> Any:
        return self.request("PUT", path, json=json)
