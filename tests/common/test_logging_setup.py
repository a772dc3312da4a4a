from __future__ import annotations

import json
import logging

import pytest

from src.evaka_service.evaka_service.common.logger import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_output_has_level_and_timestamp(capsys):
    configure_logging(level="info", json_out=True)
    logging.getLogger("evaka_service.invoicing").info("Generated %d drafts", 3)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "Generated 3 drafts"
    assert record["level"] == "INFO"
    assert record["timestamp"].endswith("Z")
    assert record["name"] == "evaka_service.invoicing"


def test_reconfiguring_replaces_handler(capsys):
    configure_logging(level="DEBUG")
    configure_logging(level="WARNING")

    ours = [h for h in logging.getLogger().handlers if getattr(h, "_evaka", False)]
    assert len(ours) == 1

    logging.getLogger("evaka_service").info("hidden")
    logging.getLogger("evaka_service").warning("shown")
    out = capsys.readouterr().out
    assert "shown" in out
    assert "hidden" not in out


def test_unknown_level_falls_back_to_info():
    configure_logging(level="chatty")
    assert logging.getLogger().level == logging.INFO
