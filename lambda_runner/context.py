"""Invocation context and the builder that assembles it from response headers."""

import re
import time

from pydantic import BaseModel

# =============================================================================
# Constants
# =============================================================================

HEADER_REQUEST_ID = "lambda-runtime-aws-request-id"
HEADER_DEADLINE_MS = "lambda-runtime-deadline-ms"
HEADER_FUNCTION_ARN = "lambda-runtime-invoked-function-arn"
HEADER_TRACE_ID = "lambda-runtime-trace-id"

_HEADER_SEPARATOR = re.compile(r":\s*")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# =============================================================================
# Context
# =============================================================================


class InvocationContext(BaseModel):
    """Metadata of the invocation being processed.

    Fields:
        aws_request_id: Identifier of the invocation, used to report its result
        deadline_ms: Epoch time in milliseconds by which processing must end
        invoked_function_arn: Identifier of the invoked function (may be empty)
        trace_id: Tracing header value (may be empty)
    """

    aws_request_id: str = ""
    deadline_ms: int = 0
    invoked_function_arn: str = ""
    trace_id: str = ""

    model_config = {"frozen": True}

    def get_remaining_time_in_millis(self) -> int:
        """Milliseconds left before the deadline (negative once it has passed)."""
        return self.deadline_ms - int(time.time() * 1000)


# =============================================================================
# Builder
# =============================================================================


def _parse_deadline(value: str) -> int:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


class ContextBuilder:
    """Accumulates context fields from headers, in arrival order.

    Headers arrive either as parsed ``(name, value)`` pairs (`add_header`) or
    as raw ``Name: value`` lines (`add_header_line`). The builder does not
    validate anything: missing fields fall back to their defaults and the
    caller decides what is mandatory.
    """

    def __init__(self) -> None:
        self._aws_request_id = ""
        self._deadline_ms = 0
        self._invoked_function_arn = ""
        self._trace_id = ""

    def set_aws_request_id(self, value: str) -> None:
        self._aws_request_id = value

    def set_deadline_ms(self, value: int) -> None:
        self._deadline_ms = value

    def set_invoked_function_arn(self, value: str) -> None:
        self._invoked_function_arn = value

    def set_trace_id(self, value: str) -> None:
        self._trace_id = value

    def add_header(self, name: str, value: str) -> None:
        """Record a header if it is one of the four runtime headers.

        Args:
            name: Header name, matched case-insensitively.
            value: Raw header value; surrounding whitespace is stripped.
        """
        name = name.strip().lower()
        value = value.strip()
        if name == HEADER_REQUEST_ID:
            self.set_aws_request_id(value)
        elif name == HEADER_DEADLINE_MS:
            self.set_deadline_ms(_parse_deadline(value))
        elif name == HEADER_FUNCTION_ARN:
            self.set_invoked_function_arn(value)
        elif name == HEADER_TRACE_ID:
            self.set_trace_id(value)

    def add_header_line(self, line: str) -> None:
        """Record a raw ``Name: value`` header line.

        Lines without a separator (status line, blank terminator) are ignored.
        """
        if not _HEADER_SEPARATOR.search(line):
            return
        name, value = _HEADER_SEPARATOR.split(line, maxsplit=1)
        self.add_header(name, value)

    def build_context(self) -> InvocationContext:
        """Build the immutable context from the fields collected so far."""
        return InvocationContext(
            aws_request_id=self._aws_request_id,
            deadline_ms=self._deadline_ms,
            invoked_function_arn=self._invoked_function_arn,
            trace_id=self._trace_id,
        )
