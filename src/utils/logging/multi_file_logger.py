"""Per-component JSON log files.

Each record is written as one JSON document to the file of the component
that emitted it. ERROR and above are copied to errors.log as well.

    orchestrator.log  coordinator runs, routing decisions, specialist dispatch
    devops.log        DevOps responder, tools and WIQL client
    servicenow.log    ServiceNow responder, tools and Table API client
    chat_api.log      HTTP surface, chat service and session store
    system.log        startup, configuration and unrouted records
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

LOG_FILES = {
    "orchestrator": "orchestrator.log",
    "devops": "devops.log",
    "servicenow": "servicenow.log",
    "chat_api": "chat_api.log",
    "system": "system.log",
}
ERROR_LOG_FILE = "errors.log"
MAX_LOG_BYTES = 50 * 1024 * 1024


def _file_handler(path: Path, level: int, backup_count: int) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)
    return handler


class MultiFileLogger:
    """Routes JSON records to one rotating file per component."""

    def __init__(self, log_dir: str = "logs", level: int = logging.INFO):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.level = level
        self._lock = Lock()

        self._handlers: Dict[str, logging.Handler] = {
            component: _file_handler(self.log_dir / filename, level, backup_count=5)
            for component, filename in LOG_FILES.items()
        }
        self._error_handler = _file_handler(self.log_dir / ERROR_LOG_FILE, logging.ERROR, backup_count=10)

    def isEnabledFor(self, level: int) -> bool:
        return level >= self.level

    @staticmethod
    def format_entry(level: int, message: str, **fields) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": logging.getLevelName(level),
            "message": message,
        }
        entry.update(fields)
        return json.dumps(entry, default=str)

    def log(self, level: int, message: str, component: Optional[str] = None, **fields):
        if not self.isEnabledFor(level):
            return

        record = logging.makeLogRecord({
            "name": "itops_assistant",
            "levelno": level,
            "levelname": logging.getLevelName(level),
            "msg": self.format_entry(level, message, component=component or "system", **fields),
        })
        handler = self._handlers.get(component, self._handlers["system"])

        with self._lock:
            if level >= handler.level:
                handler.emit(record)
            if level >= logging.ERROR:
                self._error_handler.emit(record)


_multi_logger: Optional[MultiFileLogger] = None
_multi_logger_lock = Lock()


def get_multi_file_logger() -> MultiFileLogger:
    """Process-wide logger, created on first use.

    Directory and level come straight from LOG_DIR / LOG_LEVEL so logging
    works before the configuration layer has loaded.
    """
    global _multi_logger
    if _multi_logger is None:
        with _multi_logger_lock:
            if _multi_logger is None:
                level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
                _multi_logger = MultiFileLogger(
                    log_dir=os.environ.get("LOG_DIR", "logs"),
                    level=getattr(logging, level_name, logging.INFO)
                )
    return _multi_logger
