"""Tests for the single-retry wrapper."""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from prometheus_client import REGISTRY

from procwrap.resilience.retry import RETRY_MESSAGE, RetryOptions, with_retry


class Abort(BaseException):
    """Non-Exception raise, the counterpart of a non-error rejection."""


def flaky(failures: int):
    """Binary procedure failing *failures* times before doubling its input."""
    calls = []

    async def procedure(input, context):
        calls.append(input)
        if len(calls) <= failures:
            raise RuntimeError(f"failure attempt {len(calls)}")
        return input["value"] * 2

    return procedure, calls


class TestRetryOutcome:
    """Attempt counting and error surfacing."""

    @pytest.mark.asyncio
    async def test_success_is_returned_without_retry(self, mock_log, log_context):
        procedure, calls = flaky(failures=0)

        result = await with_retry(procedure)({"value": 21}, log_context)

        assert result == 42
        assert len(calls) == 1
        mock_log.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_fail_once_then_succeed(self, log_context):
        procedure, calls = flaky(failures=1)

        result = await with_retry(procedure)({"value": 21}, log_context)

        assert result == 42
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_fail_twice_raises_second_error(self, mock_log, log_context):
        procedure, calls = flaky(failures=5)

        with pytest.raises(RuntimeError, match="failure attempt 2") as exc_info:
            await with_retry(procedure)({"value": 21}, log_context)

        assert len(calls) == 2
        assert exc_info.value.__context__ is None
        mock_log.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_non_exception_is_not_retried(self, mock_log, log_context):
        calls = []

        async def procedure(input, context):
            calls.append(input)
            raise Abort()

        with pytest.raises(Abort):
            await with_retry(procedure)({"value": 1}, log_context)

        assert len(calls) == 1
        mock_log.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_same_arguments_on_both_attempts(self, log_context):
        procedure, calls = flaky(failures=1)

        await with_retry(procedure)({"value": 3}, log_context)

        assert calls == [{"value": 3}, {"value": 3}]


class TestRetryLogging:
    """Retry reporting through the context's logger."""

    @pytest.mark.asyncio
    async def test_warning_carries_error_payload(self, mock_log, log_context):
        procedure, _ = flaky(failures=1)

        await with_retry(procedure)({"value": 21}, log_context)

        mock_log.warning.assert_called_once()
        args, kwargs = mock_log.warning.call_args
        assert args == (RETRY_MESSAGE,)
        error = kwargs["extra"]["error"]
        assert error["message"] == "failure attempt 1"
        assert "Traceback" in error["stack"]
        assert "RuntimeError: failure attempt 1" in error["stack"]

    @pytest.mark.asyncio
    async def test_mapping_context_log_is_used(self, mock_log):
        procedure, _ = flaky(failures=1)

        await with_retry(procedure)({"value": 21}, {"log": mock_log})

        mock_log.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_warn_only_log_receives_payload(self):
        log = Mock(spec=["debug", "info", "warn", "error"])
        procedure, calls = flaky(failures=1)

        result = await with_retry(procedure)({"value": 21}, SimpleNamespace(log=log))

        assert result == 42
        assert len(calls) == 2
        log.warn.assert_called_once()
        args, kwargs = log.warn.call_args
        assert args[0] == RETRY_MESSAGE
        assert args[1]["error"]["message"] == "failure attempt 1"
        assert "Traceback" in args[1]["error"]["stack"]
        assert kwargs == {}

    @pytest.mark.asyncio
    async def test_warn_only_log_untouched_without_retry(self):
        log = Mock(spec=["debug", "info", "warn", "error"])
        procedure, _ = flaky(failures=0)

        await with_retry(procedure)({"value": 21}, {"log": log})

        log.warn.assert_not_called()

    @pytest.mark.asyncio
    async def test_context_without_log_retries_silently(self):
        procedure, calls = flaky(failures=1)

        result = await with_retry(procedure)({"value": 21}, SimpleNamespace(user_id="u-1"))

        assert result == 42
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_retry_logged_on_module_logger(self, caplog, log_context):
        procedure, _ = flaky(failures=1)

        with caplog.at_level("INFO", logger="procwrap.resilience.retry"):
            await with_retry(procedure, RetryOptions(operation="billing"))({"value": 1}, log_context)

        assert [r.message for r in caplog.records] == ["retrying_after_error"]
        assert caplog.records[0].operation == "billing"

    @pytest.mark.asyncio
    async def test_retry_counted_in_metrics(self, log_context):
        def sample():
            return REGISTRY.get_sample_value(
                "procwrap_retry_attempts_total", {"operation": "metered"}
            ) or 0.0

        before = sample()
        procedure, _ = flaky(failures=1)

        await with_retry(procedure, {"operation": "metered"})({"value": 1}, log_context)

        assert sample() == before + 1


class TestRetryShapes:
    """Nullary and unary procedures."""

    @pytest.mark.asyncio
    async def test_nullary_procedure(self):
        calls = 0

        async def procedure():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise Exception("transient failure")
            return 42

        wrapped = with_retry(procedure)

        assert await wrapped() == 42
        assert calls == 2

    @pytest.mark.asyncio
    async def test_unary_procedure(self):
        calls = 0

        async def procedure(input):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise ValueError("transient failure")
            return input["value"] * 2

        assert await with_retry(procedure)({"value": 21}) == 42
        assert calls == 2

    def test_wrapped_keeps_metadata(self):
        async def fetch_quote(input, context):
            """Fetch a quote."""

        wrapped = with_retry(fetch_quote)

        assert wrapped.__name__ == "fetch_quote"
        assert wrapped.__doc__ == "Fetch a quote."
