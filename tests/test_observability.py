import asyncio
import io
import json
import logging

import pytest

from cryptomoji.observability import (
    Layer,
    MojiLogger,
    StructuredHandler,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
    timed_operation,
)


@pytest.fixture
def captured():
    stream = io.StringIO()
    logger = MojiLogger("test", Layer.HANDLER, level="debug")
    handler = StructuredHandler(stream)
    logger.raw.addHandler(handler)
    yield logger, stream
    logger.raw.removeHandler(handler)


def _events(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_structured_event_fields(captured):
    logger, stream = captured
    token = set_correlation_id("corr-1")
    try:
        logger.warning("rejected", error_code="NoCollection", signer="pub1")
    finally:
        reset_correlation_id(token)

    (event,) = _events(stream)
    assert event["level"] == "warning"
    assert event["logger"] == "cryptomoji.handler.test"
    assert event["message"] == "rejected"
    assert event["layer"] == "handler"
    assert event["error_code"] == "NoCollection"
    assert event["correlation_id"] == "corr-1"
    assert event["context"] == {"signer": "pub1"}


def test_get_correlation_id_generates_once():
    token = set_correlation_id("")
    try:
        cid = get_correlation_id()
        assert cid.startswith("corr-")
        assert get_correlation_id() == cid
    finally:
        reset_correlation_id(token)


def test_timed_operation_sync(captured):
    logger, stream = captured

    @timed_operation(logger, "double")
    def double(x):
        return 2 * x

    assert double(4) == 8
    (event,) = _events(stream)
    assert event["operation"] == "double"
    assert event["message"] == "Operation double completed"
    assert event["duration_ms"] >= 0


def test_timed_operation_async_failure(captured):
    logger, stream = captured

    @timed_operation(logger, "boom")
    async def boom():
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        asyncio.run(boom())
    (event,) = _events(stream)
    assert event["level"] == "warning"
    assert event["message"] == "Operation boom failed"


def test_exception_is_serialized(captured):
    logger, stream = captured
    try:
        raise KeyError("k")
    except KeyError:
        logger.error("failed", exc_info=True)
    (event,) = _events(stream)
    assert "KeyError" in event["exception"]
