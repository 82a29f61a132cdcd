"""Tests for retry utilities."""

import pytest

from glprovider.core.exceptions import DeletionTimeoutError, RemoteTransientError
from glprovider.utils.retry import retry_on_exception, wait_until_gone


def test_retry_on_exception_success_first_try():
    """Test successful execution on first try."""
    call_count = 0

    @retry_on_exception(max_attempts=3)
    def func():
        nonlocal call_count
        call_count += 1
        return "success"

    result = func()
    assert result == "success"
    assert call_count == 1


def test_retry_on_exception_success_after_retries():
    """Test successful execution after retries."""
    call_count = 0

    @retry_on_exception(
        exceptions=(RemoteTransientError,), max_attempts=3, min_wait=0.01, max_wait=0.02
    )
    def func():
        nonlocal call_count
        call_count += 1
        if call_count < 3:
            raise RemoteTransientError("Temporary error", status_code=503)
        return "success"

    result = func()
    assert result == "success"
    assert call_count == 3


def test_retry_on_exception_exhausted():
    """Test retry exhaustion re-raises the last error."""

    @retry_on_exception(
        exceptions=(RemoteTransientError,), max_attempts=3, min_wait=0.01, max_wait=0.02
    )
    def func():
        raise RemoteTransientError("Persistent error", status_code=502)

    with pytest.raises(RemoteTransientError, match="Persistent error"):
        func()


def test_retry_on_exception_wrong_exception_type():
    """Test that wrong exception types are not retried."""
    call_count = 0

    @retry_on_exception(exceptions=(RemoteTransientError,), max_attempts=3)
    def func():
        nonlocal call_count
        call_count += 1
        raise ValueError("Different error")

    with pytest.raises(ValueError, match="Different error"):
        func()
    assert call_count == 1


def test_wait_until_gone_immediately():
    """Test no waiting when the object is already gone."""
    checks = []

    def is_gone():
        checks.append(1)
        return True

    wait_until_gone(is_gone, "gitlab_test 1", timeout=1, interval=0.01)
    assert len(checks) == 1


def test_wait_until_gone_after_polls():
    """Test polling continues until the check reports gone."""
    checks = []

    def is_gone():
        checks.append(1)
        return len(checks) >= 3

    wait_until_gone(is_gone, "gitlab_test 1", timeout=5, interval=0.01)
    assert len(checks) == 3


def test_wait_until_gone_timeout():
    """Test DeletionTimeoutError when the object never disappears."""
    with pytest.raises(DeletionTimeoutError, match="gitlab_test 1 was still present"):
        wait_until_gone(lambda: False, "gitlab_test 1", timeout=0.05, interval=0.01)


def test_wait_until_gone_check_error_propagates():
    """Test errors from the check are not swallowed."""

    def is_gone():
        raise RemoteTransientError("boom")

    with pytest.raises(RemoteTransientError, match="boom"):
        wait_until_gone(is_gone, "gitlab_test 1", timeout=1, interval=0.01)
