"""Client posting invocation results and failures back to the runtime API."""

import json
import sys
from typing import Any

import httpx
from pydantic import BaseModel

from lambda_runner._internal.failure import build_failure_record, to_error_response
from lambda_runner._internal.http import DEFAULT_TIMEOUT, create_http_client, invocation_path
from lambda_runner.exceptions import ReportError, SerializationError

BINARY_RESPONSE_HINT = (
    "This error usually happens when you try to return binary content. "
    "Binary data (images, PDFs, ...) must be base64-encoded or otherwise "
    "converted to text before being returned."
)


def _encode_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_json(data: Any) -> bytes:
    """Encode a handler result as JSON.

    Raises:
        SerializationError: The value has no JSON representation.
    """
    try:
        encoded = json.dumps(
            data,
            default=_encode_default,
            allow_nan=False,
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            "The Lambda response cannot be encoded to JSON.\n"
            f"{BINARY_RESPONSE_HINT}\n"
            f"Here is the original JSON error: '{e}'"
        ) from e
    return encoded


class ResponseReporter:
    """Reports invocation outcomes to the runtime API.

    Reporting is never retried: on a transport error the HTTP client is closed
    and ReportError is raised to the caller.
    """

    def __init__(
        self,
        api_url: str,
        *,
        timeout_ms: int = int(DEFAULT_TIMEOUT * 1000),
        debug: bool = False,
    ) -> None:
        """Initialize the reporter.

        Args:
            api_url: Runtime API address as ``host:port``.
            timeout_ms: Request timeout in milliseconds.
            debug: Enable debug logging to stderr.
        """
        self._base_url = f"http://{api_url}"
        self._timeout_ms = timeout_ms
        self._debug = debug
        self._client: httpx.Client | None = None

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[lambda-runner:report] {message}", file=sys.stderr)

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = create_http_client(
                timeout=self._timeout_ms / 1000, base_url=self._base_url
            )
        return self._client

    def close(self) -> None:
        """Release the HTTP client, if any."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ResponseReporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send_response(self, request_id: str, result: Any) -> None:
        """Post a handler result for an invocation.

        Args:
            request_id: The invocation id.
            result: Any JSON-serializable value (pydantic models are dumped).

        Raises:
            SerializationError: The result cannot be encoded; nothing is posted.
            ReportError: The POST failed.
        """
        self._post_json(invocation_path(request_id, "response"), encode_json(result))
        self._log_debug(f"Response sent for {request_id}")

    def signal_failure(self, request_id: str, error: BaseException) -> None:
        """Log a failure with its chain of causes and post it for an invocation.

        The log line carries the full chain; the posted body only the
        top-level error.

        Raises:
            ReportError: The POST failed.
        """
        record = build_failure_record(error)

        print(
            f"{request_id}\tInvoke Error\t"
            f"{record.model_dump_json(by_alias=True, exclude_none=True)}",
            file=sys.stderr,
            flush=True,
        )

        body = to_error_response(record).model_dump(by_alias=True)
        self._post_json(invocation_path(request_id, "error"), encode_json(body))
        self._log_debug(f"Error sent for {request_id}: {record.error_type}")

    def _post_json(self, path: str, content: bytes) -> None:
        try:
            response = self._get_client().post(
                path,
                content=content,
                headers={
                    "Content-Type": "application/json",
                    "Content-Length": str(len(content)),
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            status_code = None
            if isinstance(e, httpx.HTTPStatusError):
                status_code = e.response.status_code
            self.close()
            raise ReportError(
                f"Error while calling the Lambda runtime API: {e}", status_code=status_code
            ) from e
