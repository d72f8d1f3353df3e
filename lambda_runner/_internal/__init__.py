"""Internal modules for the Lambda runner.

WARNING: This package contains the runtime API clients driven by Runner.
These are not intended for direct use in application code.

Modules:
    fetcher - Next-invocation long-poll client
    reporter - Response and error reporting client
    failure - Failure record models
    http - Shared HTTP client configuration
"""

from lambda_runner._internal.fetcher import InvocationFetcher, RawInvocation
from lambda_runner._internal.reporter import ResponseReporter

__all__ = [
    "InvocationFetcher",
    "RawInvocation",
    "ResponseReporter",
]
