"""Lambda runner for Python.

A custom runtime client for the Lambda runtime API: it long-polls for the
next invocation, hands it to a handler and posts the result or the failure
back.

Public API:
    Runner - The poll / handle / report loop
    Handler - Protocol for handler objects
    InvocationContext - Metadata of the invocation being processed

Internal (not for direct use):
    _internal.fetcher - Next-invocation long-poll client
    _internal.reporter - Response and error reporting client
"""

from lambda_runner._version import __version__
from lambda_runner.context import ContextBuilder, InvocationContext
from lambda_runner.runner import EXIT_FAILURE, EXIT_SUCCESS, Handler, Runner

__all__ = [
    "__version__",
    "Runner",
    "Handler",
    "InvocationContext",
    "ContextBuilder",
    "EXIT_SUCCESS",
    "EXIT_FAILURE",
]
