from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..models.config_models import ApiConfig, ImportProfile
from ..models.processing_result import BatchResponse
from ..models.row_data import MappedRecord

"""HTTP collaborator for the back-office administrator API.

SubmissionClient posts one batch to a profile's bulk endpoint and returns the
parsed ``{summary, errors}`` body. Anything that prevents a usable body
(network error, timeout, non-2xx status, malformed JSON) is raised as
TransportError; the scheduler records it as a whole-batch failure.
"""

__all__ = [
    "TransportError",
    "SubmissionClient",
    "parse_batch_response",
]

logger = logging.getLogger(__name__)

ACCEPTED_STATUS = (200, 201)


class TransportError(Exception):
    """Raised when a batch submission yields no usable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def parse_batch_response(payload: Any) -> BatchResponse:
    """Parse a bulk endpoint body, with or without the ``data`` envelope."""
    try:
        body = payload.get("data", payload) if isinstance(payload, dict) else payload
        if not isinstance(body, dict):
            raise TypeError("response body is not an object")
        summary = body["summary"]
        if not isinstance(summary, dict):
            raise TypeError("'summary' is not an object")
        errors = body.get("errors") or []
        if not isinstance(errors, list):
            raise TypeError("'errors' is not a list")
        total = summary.get("total")
        return BatchResponse(
            created=int(summary.get("created") or 0),
            failed=int(summary.get("failed") or 0),
            errors=tuple(e if isinstance(e, dict) else {"error": str(e)} for e in errors),
            total=int(total) if total is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise TransportError(f"malformed bulk response: {e}") from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class SubmissionClient:
    """Async client for the bulk create and option lookup endpoints.

    Usage:
        async with SubmissionClient(config.api) as client:
            response = await client.submit(profile, records)
    """

    def __init__(self, api: ApiConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.api = api
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api.base_url or "",
                timeout=self.api.timeout_seconds,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api.token:
            headers["Authorization"] = f"Bearer {self.api.token}"
        return headers

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> SubmissionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"connection error: {e}") from e

        if response.status_code not in ACCEPTED_STATUS:
            raise TransportError(_error_message(response), status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError("response is not valid JSON", status_code=response.status_code) from e

    async def submit(self, profile: ImportProfile, records: Sequence[MappedRecord]) -> BatchResponse:
        """POST one batch to the profile's bulk endpoint."""
        body = {profile.payload_key: [r.to_payload() for r in records]}
        logger.debug("POST %s (%d records)", profile.endpoint, len(records))
        payload = await self._request("POST", profile.endpoint, json=body)
        return parse_batch_response(payload)

    async def list_options(self, resource: str) -> list[tuple[Any, str]]:
        """Return active ``(id, name)`` pairs for a lookup resource (countries, specialties)."""
        payload = await self._request("GET", f"/administrator/{resource}")
        items = payload.get("data", []) if isinstance(payload, dict) else payload
        if not isinstance(items, list):
            raise TransportError(f"unexpected '{resource}' listing")
        return [
            (item.get("id"), str(item.get("name", "")))
            for item in items
            if isinstance(item, dict) and item.get("status")
        ]
