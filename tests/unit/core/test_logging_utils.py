import json
import logging
from io import StringIO

import pytest

from service_core.errors import ServiceError
from service_core.logging_utils import JsonFormatter, cause_chain, configure_logger, log_service_error


def _capture(name):
    logger = logging.getLogger(name)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.handlers = []
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, stream


def _records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


# ---------------------------------------------------------------------------
# JsonFormatter Tests
# ---------------------------------------------------------------------------

def test_json_formatter_outputs_valid_json_and_expected_keys():
    logger, stream = _capture("json_formatter_test")

    logger.info("hello", extra={"event": "test_event", "request_id": "abc", "status_code": 404})
    payload = json.loads(stream.getvalue())

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "json_formatter_test"
    assert payload["event"] == "test_event"
    assert payload["request_id"] == "abc"
    assert payload["status_code"] == 404
    assert "lineno" not in payload


def test_json_formatter_includes_exception_text():
    logger, stream = _capture("json_formatter_exc_test")

    try:
        raise ValueError("bad")
    except ValueError:
        logger.exception("failed")

    payload = json.loads(stream.getvalue())
    assert "ValueError: bad" in payload["exc_info"]


# ---------------------------------------------------------------------------
# configure_logger Tests
# ---------------------------------------------------------------------------

def test_configure_logger_is_idempotent():
    logger_name = "config_test_logger"
    logger = logging.getLogger(logger_name)
    logger.handlers = []

    l1 = configure_logger(logger_name)
    l2 = configure_logger(logger_name)

    assert l1 is l2
    assert len(l1.handlers) == 1
    assert isinstance(l1.handlers[0].formatter, JsonFormatter)
    assert l1.propagate is False


# ---------------------------------------------------------------------------
# cause_chain Tests
# ---------------------------------------------------------------------------

def test_cause_chain_walks_nested_causes():
    root = ConnectionError("socket closed")
    try:
        raise TimeoutError("read timed out") from root
    except TimeoutError as exc:
        middle = exc

    error = ServiceError.external_with_cause("upload failed", middle)

    assert cause_chain(error) == [
        "TimeoutError: read timed out",
        "ConnectionError: socket closed",
    ]


def test_cause_chain_empty_without_cause():
    assert cause_chain(ServiceError.external("boom")) == []


def test_cause_chain_respects_suppressed_context():
    try:
        try:
            raise KeyError("internal detail")
        except KeyError:
            raise LookupError("user:123 missing") from None
    except LookupError as exc:
        hidden = exc

    error = ServiceError.external_with_cause("lookup failed", hidden)

    assert cause_chain(error) == ["LookupError: user:123 missing"]


def test_cause_chain_follows_implicit_context():
    try:
        try:
            raise KeyError("k")
        except KeyError:
            raise LookupError("outer")
    except LookupError as exc:
        outer = exc

    assert cause_chain(outer) == ["KeyError: 'k'"]


def test_cause_chain_reports_non_exception_cause():
    error = ServiceError.external_with_cause("upload failed", "socket timeout")

    assert cause_chain(error) == ["str: socket timeout"]


def test_cause_chain_stops_on_cycles():
    a = ValueError("a")
    b = ValueError("b")
    a.__cause__ = b
    b.__cause__ = a

    assert cause_chain(a) == ["ValueError: b"]


# ---------------------------------------------------------------------------
# log_service_error Tests
# ---------------------------------------------------------------------------

def test_log_service_error_server_side_logs_error_with_chain():
    logger, stream = _capture("log_service_error_5xx")

    error = ServiceError.external_with_cause("upload failed", TimeoutError("timed out"))
    log_service_error(logger, error, request_id="rid-1", method="PUT", path="/media")

    (record,) = _records(stream)
    assert record["level"] == "ERROR"
    assert record["message"] == "upload failed"
    assert record["status_code"] == 502
    assert record["code"] == "EXTERNAL"
    assert record["request_id"] == "rid-1"
    assert record["cause_chain"] == ["TimeoutError: timed out"]


@pytest.mark.parametrize(
    "error",
    [ServiceError.validation("bad"), ServiceError.not_found("user:1")],
)
def test_log_service_error_client_side_logs_warning(error):
    logger, stream = _capture("log_service_error_4xx")

    log_service_error(logger, error)

    (record,) = _records(stream)
    assert record["level"] == "WARNING"
    assert "cause_chain" not in record
