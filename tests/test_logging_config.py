import logging

import structlog

from stakeclient.logging_config import redact_secrets, setup_logging


def test_redacts_top_level_secret():
    event = redact_secrets(None, "info", {"event": "saved", "privateKey": "deadbeef"})

    assert event["privateKey"] == "***"
    assert event["event"] == "saved"


def test_redacts_nested_record():
    record = {"owner": "User:a", "privateKey": "deadbeef"}

    event = redact_secrets(None, "info", {"event": "export", "record": record})

    assert event["record"] == {"owner": "User:a", "privateKey": "***"}
    assert record["privateKey"] == "deadbeef"


def test_setup_logging_installs_single_handler():
    setup_logging("warning", "json")
    setup_logging("debug", "json")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert root.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
