"""Tests for failure record models."""

from lambda_runner._internal.failure import (
    FailureRecord,
    build_failure_record,
    format_stack,
    to_error_response,
)


def _catch(func):
    try:
        func()
    except Exception as e:
        return e
    raise AssertionError("expected an exception")


def _explicit_chain():
    try:
        try:
            raise KeyError("missing")
        except KeyError as e:
            raise ValueError("invalid") from e
    except ValueError as e:
        raise RuntimeError("failed") from e


def _implicit_context():
    try:
        raise ValueError("first")
    except ValueError:
        raise RuntimeError("second")  # noqa: B904


def _suppressed_context():
    try:
        raise ValueError("first")
    except ValueError:
        raise RuntimeError("second") from None


class TestBuildFailureRecord:
    """Tests for build_failure_record()."""

    def test_single_error(self):
        """Should record type, message and stack without previous."""
        record = build_failure_record(_catch(lambda: int("x")))

        assert record.error_type == "ValueError"
        assert "invalid literal" in record.error_message
        assert record.previous is None
        assert any("_catch" in line for line in record.stack)

    def test_explicit_chain(self):
        """Should follow __cause__ until the chain ends."""
        record = build_failure_record(_catch(_explicit_chain))

        assert record.error_type == "RuntimeError"
        assert [(p.error_type, p.error_message) for p in record.previous] == [
            ("ValueError", "invalid"),
            ("KeyError", "'missing'"),
        ]
        assert record.previous[1].previous is None

    def test_implicit_context(self):
        """Should follow implicit exception context."""
        record = build_failure_record(_catch(_implicit_context))
        assert [p.error_message for p in record.previous] == ["first"]

    def test_suppressed_context(self):
        """Should stop at 'raise ... from None'."""
        record = build_failure_record(_catch(_suppressed_context))
        assert record.previous is None

    def test_cyclic_chain_terminates(self):
        """Should visit each cause once even when causes form a cycle."""
        first = ValueError("first")
        second = RuntimeError("second")
        first.__cause__ = second
        second.__cause__ = first

        record = build_failure_record(first)
        assert [p.error_message for p in record.previous] == ["second"]

    def test_error_without_traceback(self):
        """Exceptions never raised should have an empty stack."""
        assert format_stack(ValueError("never raised")) == []


class TestSerialization:
    """Tests for wire format of failure records."""

    def test_camel_case_aliases(self):
        """Should dump camelCase keys and omit empty previous."""
        record = FailureRecord(error_type="ValueError", error_message="bad", stack=["a"])
        assert record.model_dump(by_alias=True, exclude_none=True) == {
            "errorType": "ValueError",
            "errorMessage": "bad",
            "stack": ["a"],
        }

    def test_error_response_has_no_previous(self):
        """Reduced record should carry the top-level error only."""
        record = build_failure_record(_catch(_explicit_chain))
        body = to_error_response(record).model_dump(by_alias=True)

        assert body == {
            "errorType": "RuntimeError",
            "errorMessage": "failed",
            "stackTrace": record.stack,
        }
