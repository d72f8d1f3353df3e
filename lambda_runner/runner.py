"""Runtime loop: poll for an invocation, run the handler, report the outcome."""

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from lambda_runner._internal.fetcher import InvocationFetcher
from lambda_runner._internal.http import DEFAULT_TIMEOUT
from lambda_runner._internal.reporter import ResponseReporter
from lambda_runner.context import InvocationContext
from lambda_runner.exceptions import HandlerError, RuntimeConfigError, SerializationError

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

DEFAULT_LOOP_MAX = 1
DEFAULT_REPORT_TIMEOUT_MS = int(DEFAULT_TIMEOUT * 1000)


@runtime_checkable
class Handler(Protocol):
    """User code processing one invocation."""

    def handle(self, event: Any, context: InvocationContext) -> Any: ...


HandlerLike = Handler | Callable[[Any, InvocationContext], Any]


@dataclass(frozen=True)
class HandlerOutcome:
    """Result of a handler call: either a value or the exception it raised."""

    result: Any = None
    error: BaseException | None = None


class Runner:
    """Drives the fetch / handle / report cycle against the runtime API.

    Invocations are processed strictly one at a time. The loop stops cleanly
    after ``loop_max`` invocations so the hosting process can be recycled, and
    stops with a failure exit code on the first error.

    Use `Runner.from_env(handler)` to create a runner from environment variables.
    """

    def __init__(
        self,
        handler: HandlerLike,
        *,
        api_url: str,
        loop_max: int = DEFAULT_LOOP_MAX,
        report_timeout_ms: int = DEFAULT_REPORT_TIMEOUT_MS,
        debug: bool = False,
        fetcher: InvocationFetcher | None = None,
        reporter: ResponseReporter | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            handler: Object with a ``handle(event, context)`` method, or a
                callable taking ``(event, context)``.
            api_url: Runtime API address as ``host:port``.
            loop_max: Number of invocations processed before `run` returns.
            report_timeout_ms: Timeout of result/error POSTs in milliseconds.
            debug: Enable debug logging to stderr.
            fetcher: Fetcher to use instead of building one from ``api_url``.
            reporter: Reporter to use instead of building one from ``api_url``.
        """
        self._handler = handler
        self._loop_max = loop_max
        self._debug = debug
        self._fetcher = fetcher or InvocationFetcher(api_url, debug=debug)
        self._reporter = reporter or ResponseReporter(
            api_url, timeout_ms=report_timeout_ms, debug=debug
        )

    @classmethod
    def from_env(cls, handler: HandlerLike) -> "Runner":
        """Create a runner from environment variables.

        Required environment variables:
            AWS_LAMBDA_RUNTIME_API: The runtime API address (``host:port``).

        Optional environment variables:
            LAMBDA_RUNNER_LOOP_MAX: Invocations to process before stopping (default 1).
            LAMBDA_RUNNER_REPORT_TIMEOUT_MS: Timeout of result/error POSTs.
            LAMBDA_RUNNER_DEBUG: Set to "1" to enable debug logging.

        Raises:
            RuntimeConfigError: AWS_LAMBDA_RUNTIME_API is not set.
            ValueError: A numeric variable is not a valid integer.
        """
        api_url = os.environ.get("AWS_LAMBDA_RUNTIME_API")
        if not api_url:
            raise RuntimeConfigError("AWS_LAMBDA_RUNTIME_API environment variable is not set")

        debug = os.environ.get("LAMBDA_RUNNER_DEBUG", "") == "1"
        loop_max = int(os.environ.get("LAMBDA_RUNNER_LOOP_MAX", str(DEFAULT_LOOP_MAX)))
        report_timeout_ms = int(
            os.environ.get("LAMBDA_RUNNER_REPORT_TIMEOUT_MS", str(DEFAULT_REPORT_TIMEOUT_MS))
        )

        return cls(
            handler,
            api_url=api_url,
            loop_max=loop_max,
            report_timeout_ms=report_timeout_ms,
            debug=debug,
        )

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[lambda-runner] {message}", file=sys.stderr)

    def close(self) -> None:
        """Release the fetcher and reporter connections."""
        self._fetcher.close()
        self._reporter.close()

    def __enter__(self) -> "Runner":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def run(self) -> int:
        """Process invocations until the loop budget is spent or an error occurs.

        Returns:
            EXIT_SUCCESS after ``loop_max`` invocations, EXIT_FAILURE on the
            first error.
        """
        loops = 0
        try:
            while True:
                loops += 1
                if loops > self._loop_max:
                    self._log_debug(f"Loop budget of {self._loop_max} reached, stopping")
                    return EXIT_SUCCESS
                try:
                    self.process_next_event()
                except (HandlerError, SerializationError):
                    # Already logged and reported by signal_failure.
                    return EXIT_FAILURE
                except Exception as e:
                    print(f"Fatal runtime error: {type(e).__name__}: {e}", file=sys.stderr)
                    return EXIT_FAILURE
        finally:
            self.close()

    def process_next_event(self) -> None:
        """Wait for the next invocation, run the handler and report its outcome.

        A result that cannot be encoded is reported as a failure of the
        invocation before SerializationError propagates.

        Raises:
            HandlerError: The handler raised; the failure was reported first.
            SerializationError: The result has no JSON form; reported first.
            LambdaRunnerError: Fetching or reporting failed.
        """
        event, context = self._fetcher.wait_next_invocation()
        request_id = context.aws_request_id

        outcome = self._call_handler(event, context)
        if outcome.error is not None:
            error = outcome.error
            self._reporter.signal_failure(request_id, error)
            if isinstance(error, KeyboardInterrupt):
                raise error
            raise HandlerError(request_id, error) from error

        try:
            self._reporter.send_response(request_id, outcome.result)
        except SerializationError as e:
            self._reporter.signal_failure(request_id, e)
            raise

    def _call_handler(self, event: Any, context: InvocationContext) -> HandlerOutcome:
        self._log_debug(f"Invoking handler for {context.aws_request_id}")
        try:
            if isinstance(self._handler, Handler):
                result = self._handler.handle(event, context)
            else:
                result = self._handler(event, context)
        except BaseException as e:
            return HandlerOutcome(error=e)
        return HandlerOutcome(result=result)
