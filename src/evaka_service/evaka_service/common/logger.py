from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger


class EvakaJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.fromtimestamp(record.created, timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%S.%fZ"
            )
        log_record["level"] = (log_record.get("level") or record.levelname).upper()


def configure_logging(*, level: str | int = logging.INFO, json_out: bool = False) -> logging.Logger:
    """Set up the root logger so every module logger inherits the handler.

    Calling this twice replaces the handler installed by the first call.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in [h for h in root_logger.handlers if getattr(h, "_evaka", False)]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler._evaka = True

    if json_out:
        formatter = EvakaJsonFormatter(
            "%(asctime) %(name) %(process) %(funcName) %(levelname) %(lineno) %(module) %(message)"
        )
    else:
        formatter = logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s %(funcName)s %(lineno)d %(message)s")

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)

    return logging.getLogger("evaka_service")
