"""Pydantic models for failures reported to the runtime API.

Field names are snake_case in Python and camelCase on the wire
(``errorType``, ``errorMessage``, ``stackTrace``).
"""

import traceback

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# =============================================================================
# Models
# =============================================================================


class FailureRecord(BaseModel):
    """Structured failure written to the operational log.

    Fields:
        error_type: Class name of the exception
        error_message: str() of the exception
        stack: Traceback lines, outermost frame first
        previous: Chained causes, nearest first (omitted when there are none)
    """

    error_type: str
    error_message: str
    stack: list[str]
    previous: list["FailureRecord"] | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Reduced record posted to the invocation error endpoint."""

    error_type: str
    error_message: str
    stack_trace: list[str]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Builders
# =============================================================================


def format_stack(error: BaseException) -> list[str]:
    """Split the traceback of an exception into lines."""
    return "".join(traceback.format_tb(error.__traceback__)).splitlines()


def _cause_of(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def _single_record(error: BaseException) -> FailureRecord:
    return FailureRecord(
        error_type=type(error).__name__,
        error_message=str(error),
        stack=format_stack(error),
    )


def build_failure_record(error: BaseException) -> FailureRecord:
    """Build a failure record, following the chain of causes until it ends.

    Each cause is visited once, so a cyclic chain still terminates.
    """
    record = _single_record(error)

    previous: list[FailureRecord] = []
    seen = {id(error)}
    cause = _cause_of(error)
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        previous.append(_single_record(cause))
        cause = _cause_of(cause)

    if previous:
        record = record.model_copy(update={"previous": previous})
    return record


def to_error_response(record: FailureRecord) -> ErrorResponse:
    """Reduce a failure record to the top-level error only."""
    return ErrorResponse(
        error_type=record.error_type,
        error_message=record.error_message,
        stack_trace=record.stack,
    )
