from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Final, Optional

logger = logging.getLogger("contact_relay.services.audit_log")

LOG_FILE_PREFIX: Final[str] = "email_"
LOG_FILE_SUFFIX: Final[str] = ".log"
RECORD_FORMAT: Final[str] = "[%(asctime)s] [%(levelname)s] %(message)s"

# Written once per delivered submission; the log viewer keys on it.
SENT_MESSAGE: Final[str] = "Email sent successfully"

LEVELS: Final[dict[str, int]] = {
    "INFO": logging.INFO,
    "ERROR": logging.ERROR,
}

# Every character str.splitlines() breaks on, written as its escape so one
# record is always one physical line.
_LINE_BREAK_ESCAPES: Final[dict[int, str]] = {
    ord(char): char.encode("unicode_escape").decode("ascii")
    for char in "\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029"
}


def log_file_name(day: date) -> str:
    """email_2024-05-01.log; names sort chronologically."""
    return f"{LOG_FILE_PREFIX}{day.isoformat()}{LOG_FILE_SUFFIX}"


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class IsoFormatter(logging.Formatter):
    """Renders %(asctime)s as an ISO-8601 UTC timestamp, e.g. 2024-05-01T09:30:00.123Z."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = _record_time(record).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")


class DailyFileHandler(logging.Handler):
    """
    Appends each record to <log_dir>/email_<YYYY-MM-DD>.log.

    The day comes from the record's own timestamp, so a long-running
    process starts a new file after midnight UTC. The file is opened and
    closed per record: nothing is buffered once emit() returns.
    """

    def __init__(self, log_dir: Path) -> None:
        super().__init__()
        self.log_dir = log_dir
        self.write_failures = 0

    def path_for(self, day: date) -> Path:
        return self.log_dir / log_file_name(day)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # One physical line per record, whatever the submitter typed.
            line = self.format(record).translate(_LINE_BREAK_ESCAPES)
            self.log_dir.mkdir(parents=True, exist_ok=True)
            path = self.path_for(_record_time(record).date())
            with path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except Exception:
            self.handleError(record)

    def handleError(self, record: logging.LogRecord) -> None:
        self.write_failures += 1
        if self.write_failures == 1:
            logger.error(
                "Audit log write failed under %s; further failures are counted only",
                self.log_dir,
                exc_info=True,
            )


class AuditLog:
    """
    Day-partitioned, append-only audit trail of contact form activity.

    Each instance owns a private logger, so two instances (e.g. in tests)
    never share handlers and nothing is registered process-wide.
    """

    def __init__(self, log_dir: Path | str) -> None:
        self.log_dir = Path(log_dir)
        self._handler = DailyFileHandler(self.log_dir)
        self._handler.setFormatter(IsoFormatter(RECORD_FORMAT))

        self._logger = logging.Logger("contact_relay.audit", level=logging.INFO)
        self._logger.propagate = False
        self._logger.addHandler(self._handler)

    @property
    def write_failures(self) -> int:
        return self._handler.write_failures

    def current_path(self) -> Path:
        return self._handler.path_for(datetime.now(timezone.utc).date())

    def log(self, level: str, message: str) -> None:
        try:
            levelno = LEVELS[level.upper()]
        except KeyError:
            raise ValueError(f"Unsupported audit log level: {level!r}") from None
        self._logger.log(levelno, message)

    def info(self, message: str) -> None:
        self.log("INFO", message)

    def error(self, message: str) -> None:
        self.log("ERROR", message)
