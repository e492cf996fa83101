import json
import logging

import structlog

from storefront.utils.logging import configure_logging


def test_json_output_renders_keyword_context(caplog):
    caplog.set_level(logging.INFO, logger="storefront.test")
    configure_logging(level="INFO", json_output=True)
    try:
        structlog.get_logger("storefront.test").info("Payment verified", order_id="ord-1")
    finally:
        structlog.reset_defaults()

    record = json.loads(caplog.records[-1].getMessage())
    assert record["event"] == "Payment verified"
    assert record["order_id"] == "ord-1"
    assert record["level"] == "info"


def test_httpx_logger_is_quieted():
    assert logging.getLogger("httpx").level == logging.WARNING
