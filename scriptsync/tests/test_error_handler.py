"""Tests for retry, conversion and auth classification helpers."""

import pytest

from scriptsync.exceptions import (
    AuthenticationException,
    ConfigurationException,
    DatabaseException,
    ProviderException,
    ValidationException,
)
from scriptsync.utils import (
    ErrorHandler,
    ExecutionTimer,
    convert_exceptions,
    handle_exceptions,
    is_auth_error,
    is_fatal_error,
)


class StatusError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


class TestAuthClassification:
    """Tests for is_auth_error / is_fatal_error."""

    @pytest.mark.parametrize("error", [
        AuthenticationException("denied"),
        StatusError("unauthorized", 401),
        StatusError("forbidden", 403),
        RuntimeError("Error code: 401 - invalid_api_key"),
        RuntimeError("permission_error: no access"),
    ])
    def test_auth_errors(self, error):
        assert is_auth_error(error)
        assert is_fatal_error(error)

    @pytest.mark.parametrize("error", [
        StatusError("rate limited", 429),
        StatusError("server error", 500),
        ProviderException("timeout"),
    ])
    def test_transient_errors(self, error):
        assert not is_auth_error(error)
        assert not is_fatal_error(error)

    def test_fatal_but_not_auth(self):
        assert is_fatal_error(ValidationException("bad shape"))
        assert is_fatal_error(ConfigurationException("missing endpoint"))
        assert not is_auth_error(ValidationException("bad shape"))


class TestHandleExceptions:
    """Tests for the retry decorator."""

    async def test_backoff_sequence_is_capped(self, sleep_mock):
        calls = []

        @handle_exceptions(retries=5, base_delay=1.0, backoff_factor=3.0, max_delay=5.0)
        async def flaky():
            calls.append(1)
            raise ProviderException("nope")

        with pytest.raises(ProviderException):
            await flaky()

        assert len(calls) == 5
        assert [c.args[0] for c in sleep_mock.await_args_list] == [1.0, 3.0, 5.0, 5.0]

    async def test_fallback_returned(self):
        @handle_exceptions(retries=2, fallback="default")
        async def broken():
            raise ProviderException("down")

        assert await broken() == "default"

    async def test_only_listed_exceptions_retried(self, sleep_mock):
        @handle_exceptions(retries=3, exceptions=(ProviderException,))
        async def wrong_type():
            raise KeyError("x")

        with pytest.raises(KeyError):
            await wrong_type()
        sleep_mock.assert_not_awaited()

    async def test_auth_not_retried_by_default(self, sleep_mock):
        attempts = []

        @handle_exceptions(retries=3)
        async def rejected():
            attempts.append(1)
            raise StatusError("unauthorized", 401)

        with pytest.raises(StatusError):
            await rejected()
        assert attempts == [1]
        sleep_mock.assert_not_awaited()

    def test_sync_function(self, monkeypatch):
        delays = []
        monkeypatch.setattr("scriptsync.utils.error_handler.time.sleep", delays.append)
        attempts = []

        @handle_exceptions(retries=3, base_delay=0.5)
        def eventually():
            attempts.append(1)
            if len(attempts) < 3:
                raise ProviderException("again")
            return "ok"

        assert eventually() == "ok"
        assert delays == [0.5, 1.0]


class TestConvertExceptions:
    """Tests for the exception conversion decorator."""

    async def test_maps_foreign_exception(self):
        @convert_exceptions({OSError: DatabaseException})
        async def failing():
            raise OSError("disk full")

        with pytest.raises(DatabaseException, match="disk full") as exc_info:
            await failing()
        assert exc_info.value.details["original_exception"] == "OSError"
        assert isinstance(exc_info.value.__cause__, OSError)

    async def test_own_exceptions_pass_through(self):
        @convert_exceptions({Exception: ProviderException})
        async def failing():
            raise ValidationException("already classified")

        with pytest.raises(ValidationException):
            await failing()

    async def test_auth_errors_become_authentication_exception(self):
        @convert_exceptions({Exception: ProviderException})
        async def failing():
            raise StatusError("forbidden", 403)

        with pytest.raises(AuthenticationException) as exc_info:
            await failing()
        assert exc_info.value.status_code == 403

    async def test_unmapped_exceptions_propagate(self):
        @convert_exceptions({OSError: ProviderException})
        async def failing():
            raise ValueError("plain")

        with pytest.raises(ValueError):
            await failing()


class TestErrorHandler:
    """Tests for ErrorHandler helpers."""

    def test_summarize(self):
        assert ErrorHandler.summarize(ProviderException("  upstream timeout ")) == "upstream timeout"
        assert ErrorHandler.summarize(TimeoutError()) == "TimeoutError"


class TestExecutionTimer:
    """Tests for ExecutionTimer."""

    def test_measures_block(self):
        with ExecutionTimer() as timer:
            sum(range(1000))
        assert timer.get_execution_time() >= 0
        assert timer.execution_time == timer.get_execution_time()
