"""Unit tests for retry logic."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, ConnectTimeoutError, EndpointConnectionError, ReadTimeoutError

from ecstrace.utils.retry import TRANSIENT_AWS_ERRORS, call_with_retry, retry_with_backoff


class CustomError(Exception):
    """Custom exception for testing."""

    pass


class AnotherError(Exception):
    """Another custom exception for testing."""

    pass


@pytest.fixture(autouse=True)
def mock_sleep():
    """Skip real backoff delays."""
    with patch("ecstrace.utils.retry.time.sleep") as sleep:
        yield sleep


def connection_error():
    return EndpointConnectionError(endpoint_url="https://ecs.eu-west-1.amazonaws.com")


def test_retry_success_on_first_attempt():
    """Test that successful function executes without retry."""
    mock_func = MagicMock(return_value="success")
    decorated = retry_with_backoff()(mock_func)

    assert decorated() == "success"
    assert mock_func.call_count == 1


def test_retry_transient_then_success(mock_sleep):
    """Test that a connection failure is retried."""
    mock_func = MagicMock(side_effect=[connection_error(), "success"])
    decorated = retry_with_backoff(retries=2)(mock_func)

    assert decorated() == "success"
    assert mock_func.call_count == 2
    mock_sleep.assert_called_once_with(1.0)


def test_retry_exhausted_raises_exception():
    """Test that exception is raised after all retries are exhausted."""
    mock_func = MagicMock(side_effect=connection_error())
    decorated = retry_with_backoff(retries=3)(mock_func)

    with pytest.raises(EndpointConnectionError):
        decorated()

    assert mock_func.call_count == 4  # 1 initial + 3 retries


def test_retry_default_delays(mock_sleep):
    """Test default exponential backoff delays (1s, 2s, 4s)."""
    decorated = retry_with_backoff(retries=3)(MagicMock(side_effect=connection_error()))

    with pytest.raises(EndpointConnectionError):
        decorated()

    assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0, 4.0]


def test_retry_custom_delays(mock_sleep):
    """Test custom retry delays."""
    decorated = retry_with_backoff(retries=2, delays=(0.5, 1.0))(MagicMock(side_effect=connection_error()))

    with pytest.raises(EndpointConnectionError):
        decorated()

    assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]


def test_retry_insufficient_delays_padding(mock_sleep):
    """Test that insufficient delays are padded with last value."""
    decorated = retry_with_backoff(retries=3, delays=(0.1,))(MagicMock(side_effect=connection_error()))

    with pytest.raises(EndpointConnectionError):
        decorated()

    assert [c.args[0] for c in mock_sleep.call_args_list] == [0.1, 0.1, 0.1]


def test_default_exceptions_are_transient_aws_errors():
    """Test only connection and timeout errors are retried by default."""
    assert set(TRANSIENT_AWS_ERRORS) == {EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError}


def test_read_timeout_retried():
    """Test read timeouts are retried by default."""
    mock_func = MagicMock(side_effect=[ReadTimeoutError(endpoint_url="https://logs"), "success"])

    assert retry_with_backoff(retries=1)(mock_func)() == "success"


def test_client_error_not_retried():
    """Test that API errors are returned to the caller at once."""
    mock_func = MagicMock(side_effect=ClientError(
        {"Error": {"Code": "ThrottlingException", "Message": "Rate exceeded"}}, "GetLogEvents"
    ))
    decorated = retry_with_backoff(retries=3)(mock_func)

    with pytest.raises(ClientError):
        decorated()

    assert mock_func.call_count == 1


def test_retry_unspecified_exception_no_retry():
    """Test that unspecified exceptions are not retried."""
    mock_func = MagicMock(side_effect=AnotherError("different error"))
    decorated = retry_with_backoff(retries=3, exceptions=(CustomError,))(mock_func)

    with pytest.raises(AnotherError, match="different error"):
        decorated()

    assert mock_func.call_count == 1


def test_retry_multiple_exception_types():
    """Test retry with multiple exception types."""
    mock_func = MagicMock(side_effect=[CustomError("fail1"), AnotherError("fail2"), "success"])
    decorated = retry_with_backoff(retries=3, exceptions=(CustomError, AnotherError))(mock_func)

    assert decorated() == "success"
    assert mock_func.call_count == 3


def test_retry_with_args_and_kwargs():
    """Test that function arguments are preserved through retries."""
    mock_func = MagicMock(side_effect=[connection_error(), "success"])
    decorated = retry_with_backoff(retries=2)(mock_func)

    decorated("arg1", cluster="prod")

    mock_func.assert_called_with("arg1", cluster="prod")


def test_retry_preserves_function_metadata():
    """Test that decorator preserves function name and docstring."""

    @retry_with_backoff(retries=3)
    def describe_cluster():
        """Describe one cluster."""
        return "result"

    assert describe_cluster.__name__ == "describe_cluster"
    assert describe_cluster.__doc__ == "Describe one cluster."


def test_retry_zero_retries(mock_sleep):
    """Test that zero retries means only one attempt."""
    mock_func = MagicMock(side_effect=connection_error())

    with pytest.raises(EndpointConnectionError):
        retry_with_backoff(retries=0)(mock_func)()

    assert mock_func.call_count == 1
    mock_sleep.assert_not_called()


def test_call_with_retry_passes_keywords():
    """Test call_with_retry forwards request parameters."""
    mock_func = MagicMock(side_effect=[connection_error(), {"tasks": []}])

    result = call_with_retry(mock_func, 1, (0.5,), cluster="prod", tasks=["0a1b"])

    assert result == {"tasks": []}
    mock_func.assert_called_with(cluster="prod", tasks=["0a1b"])
