# careerprofile/core/logging_config.py
import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(timestamp)s %(level)s %(name)s %(module)s %(lineno)d %(message)s"

# Chatty third-party loggers capped at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON log lines tagged with the service name."""

    def __init__(self, *args, service: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        if not log_record.get('timestamp'):
            log_record['timestamp'] = record.created
        log_record['level'] = (log_record.get('level') or record.levelname).upper()
        log_record['module'] = record.module
        log_record['lineno'] = record.lineno
        if self.service:
            log_record['service'] = self.service


def setup_logging(log_level_str: str = "INFO", service: Optional[str] = None) -> None:
    """
    Configures structured JSON logging on the root logger.
    Safe to call more than once; later calls only adjust the level.
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    if any(isinstance(h.formatter, CustomJsonFormatter) for h in root_logger.handlers):
        return

    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setFormatter(CustomJsonFormatter(LOG_FORMAT, service=service))
    root_logger.addHandler(log_handler)
    root_logger.info(f"Structured JSON logging configured with level: {logging.getLevelName(log_level)}")
