"""Long-poll client for the next-invocation endpoint."""

import json
import sys
from typing import Any, NamedTuple

import httpx

from lambda_runner._internal.http import NEXT_INVOCATION_PATH, create_http_client
from lambda_runner.context import ContextBuilder, InvocationContext
from lambda_runner.exceptions import (
    EmptyResponseError,
    FetchError,
    MalformedPayloadError,
    MissingRequestIdError,
)


class RawInvocation(NamedTuple):
    """Decoded invocation payload paired with its context."""

    event: Any
    context: InvocationContext


class InvocationFetcher:
    """Fetches invocations from the runtime API, one blocking call at a time.

    The underlying HTTP client is created on first use and kept for the
    following calls. It is closed after any transport error so that the next
    call starts from a fresh connection.
    """

    def __init__(self, api_url: str, *, debug: bool = False) -> None:
        """Initialize the fetcher.

        Args:
            api_url: Runtime API address as ``host:port``.
            debug: Enable debug logging to stderr.
        """
        self._base_url = f"http://{api_url}"
        self._debug = debug
        self._client: httpx.Client | None = None

    @property
    def next_url(self) -> str:
        return self._base_url + NEXT_INVOCATION_PATH

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[lambda-runner:fetch] {message}", file=sys.stderr)

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            # No timeout: the runtime API holds the request until work arrives.
            self._client = create_http_client(
                timeout=None, base_url=self._base_url, follow_redirects=True
            )
        return self._client

    def close(self) -> None:
        """Release the HTTP client, if any."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "InvocationFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _receive(self, builder: ContextBuilder) -> bytes:
        """Run the request, feeding headers to the builder and collecting the body."""
        body = bytearray()
        with self._get_client().stream("GET", NEXT_INVOCATION_PATH) as response:
            response.raise_for_status()
            for name, value in response.headers.multi_items():
                builder.add_header(name, value)
            for chunk in response.iter_bytes():
                body.extend(chunk)
        return bytes(body)

    def wait_next_invocation(self) -> RawInvocation:
        """Wait for the next invocation and return its payload and context.

        This call blocks until the runtime API hands out an invocation.

        Returns:
            The decoded event and its InvocationContext.

        Raises:
            FetchError: The request failed or returned a non-2xx status.
            EmptyResponseError: The response body was empty.
            MissingRequestIdError: No request id header was received.
            MalformedPayloadError: The body is not valid JSON.
        """
        builder = ContextBuilder()
        self._log_debug("Waiting for next invocation")
        try:
            body = self._receive(builder)
        except httpx.HTTPError as e:
            status_code = None
            if isinstance(e, httpx.HTTPStatusError):
                status_code = e.response.status_code
            self.close()
            raise FetchError(
                f"Failed to fetch next Lambda invocation: {e}", status_code=status_code
            ) from e

        if not body:
            raise EmptyResponseError("Empty Lambda runtime API response")

        context = builder.build_context()
        if context.aws_request_id == "":
            raise MissingRequestIdError("Failed to determine the Lambda invocation ID")

        try:
            event = json.loads(body)
        except ValueError as e:
            raise MalformedPayloadError(
                f"Invocation {context.aws_request_id} has a body that is not valid JSON: {e}"
            ) from e

        self._log_debug(f"Received invocation {context.aws_request_id}")
        return RawInvocation(event, context)
