"""Public exceptions for the Lambda runner."""


class LambdaRunnerError(Exception):
    """Base exception for all Lambda runner errors."""


class RuntimeConfigError(LambdaRunnerError):
    """Configuration error (missing env vars, invalid config)."""


class TransportError(LambdaRunnerError):
    """Error while talking to the runtime API (connection failure, non-2xx status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchError(TransportError):
    """The next invocation could not be fetched."""


class ReportError(TransportError):
    """A response or error could not be posted back."""


class ProtocolViolationError(LambdaRunnerError):
    """The runtime API answered with something that breaks its contract."""


class EmptyResponseError(ProtocolViolationError):
    """The next-invocation endpoint returned an empty body."""


class MissingRequestIdError(ProtocolViolationError):
    """The next-invocation response carried no request id."""


class MalformedPayloadError(ProtocolViolationError):
    """The next-invocation body is not valid JSON."""


class SerializationError(LambdaRunnerError):
    """A handler result cannot be encoded to JSON."""


class HandlerError(LambdaRunnerError):
    """The user handler raised.

    The failure has already been reported to the runtime API when this is
    raised. The original exception is available as ``error`` (and as
    ``__cause__``).
    """

    def __init__(self, request_id: str, error: BaseException) -> None:
        super().__init__(f"Handler failed for invocation {request_id}: {error}")
        self.request_id = request_id
        self.error = error
