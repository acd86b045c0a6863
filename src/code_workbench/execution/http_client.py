from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..config import WIRE_FORMATS, WorkbenchConfig
from ..outcomes import TransportError
from .types import ExecutionRequest, ExecutionResponse

logger = logging.getLogger(__name__)


def build_payload(request: ExecutionRequest, wire_format: str = "gateway") -> dict[str, Any]:
    """Serialize a request into the body the remote service expects.

    Example:
        ```python
        body = build_payload(ExecutionRequest("python", "3.10.0", "print(1)"), "piston")
        ```
    """
    if wire_format == "gateway":
        return {
            "language": request.language_executor_id,
            "version": request.executor_version,
            "code": request.source_code,
            "input": request.stdin,
        }
    if wire_format == "piston":
        return {
            "language": request.language_executor_id,
            "version": request.executor_version,
            "files": [{"content": request.source_code}],
            "stdin": request.stdin,
        }
    raise ValueError(f"Unknown wire format: {wire_format}")


def _normalize_body(body: Any, wire_format: str) -> Any:
    """Wrap a bare piston body in the gateway envelope.

    Example:
        ```python
        envelope = _normalize_body({"run": {"stdout": "1", "code": 0}}, "piston")
        ```
    """
    if wire_format == "piston":
        return {"success": True, "data": body}
    return body


class HttpExecutionClient:
    """Post submissions to the sandbox gateway over HTTP with httpx.

    Transport problems are returned as `TransportError` values; nothing is
    retried.

    Example:
        ```python
        client = HttpExecutionClient("http://localhost:8080/api/compiler/execute", api_token="abc")
        ```
    """

    def __init__(
        self,
        url: str,
        *,
        wire_format: str = "gateway",
        api_token: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client and request headers.

        Example:
            ```python
            client = HttpExecutionClient(url, transport=httpx.MockTransport(handler))
            ```
        """
        if not url.strip():
            raise ValueError("HttpExecutionClient requires a non-empty 'url'")
        if wire_format not in WIRE_FORMATS:
            raise ValueError("wire_format must be 'gateway' or 'piston'")
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._url = url
        self._wire_format = wire_format
        self._http = httpx.Client(headers=headers, timeout=timeout_seconds, transport=transport)

    @classmethod
    def from_config(
        cls, config: WorkbenchConfig, *, transport: httpx.BaseTransport | None = None
    ) -> "HttpExecutionClient":
        """Create a client from workbench settings.

        Example:
            ```python
            client = HttpExecutionClient.from_config(WorkbenchConfig())
            ```
        """
        return cls(
            config.execute_url,
            wire_format=config.wire_format,
            api_token=config.resolved_api_token(),
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )

    def execute(self, request: ExecutionRequest) -> ExecutionResponse | TransportError:
        """Send one submission and return the parsed JSON body.

        Example:
            ```python
            response = client.execute(ExecutionRequest("python", "3.10.0", "print(7)"))
            ```
        """
        payload = build_payload(request, self._wire_format)
        logger.info(
            "Submitting %s %s code (%d chars) to %s",
            request.language_executor_id,
            request.executor_version,
            len(request.source_code),
            self._url,
        )
        try:
            response = self._http.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = f"HTTP {exc.response.status_code}: {_error_detail(exc.response)}"
            logger.warning("Execution request rejected: %s", message)
            return TransportError(message=message)
        except httpx.HTTPError as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("Execution request failed: %s", message)
            return TransportError(message=message)

        if not response.content.strip():
            logger.warning("Execution response had no body")
            return TransportError(message="Empty response from execution service")
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Execution response was not JSON: %s", exc)
            return TransportError(message=f"Invalid JSON from execution service: {exc}")
        return ExecutionResponse(
            body=_normalize_body(body, self._wire_format),
            status_code=response.status_code,
        )

    def close(self) -> None:
        """Close the underlying HTTP connection pool.

        Example:
            ```python
            client.close()
            ```
        """
        self._http.close()

    def __enter__(self) -> "HttpExecutionClient":
        """Return self for use in a `with` block.

        Example:
            ```python
            with HttpExecutionClient(url) as client: ...
            ```
        """
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the client when leaving a `with` block.

        Example:
            ```python
            with HttpExecutionClient(url) as client: ...
            ```
        """
        self.close()


def _error_detail(response: httpx.Response) -> str:
    """Extract a readable message from an error response.

    Example:
        ```python
        detail = _error_detail(httpx.Response(500, json={"message": "boom"}))
        ```
    """
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if isinstance(body, dict):
        for field in ("message", "errorMessage", "error"):
            value = body.get(field)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or response.text.strip() or "request failed"
