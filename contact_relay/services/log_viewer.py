from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from contact_relay.services.audit_log import LOG_FILE_PREFIX, SENT_MESSAGE

logger = logging.getLogger("contact_relay.services.log_viewer")

ERROR_MARKER = "[ERROR]"
SUCCESS_MARKER = "sent successfully"

# [timestamp] [LEVEL] message
RECORD_PATTERN = re.compile(r"\[[^\]]*\] \[([A-Z]+)\] (.*)")


@dataclass(frozen=True)
class LogLine:
    text: str
    css_class: str


@dataclass(frozen=True)
class LogFileView:
    name: str
    lines: List[LogLine]


def classify_line(line: str) -> str:
    """
    ERROR wins over SUCCESS; anything else is plain INFO.

    Audit records are judged by their level field and exact message, so
    text a submitter typed into the form can't change a line's class.
    Lines that aren't audit records fall back to the substring markers.
    """
    match = RECORD_PATTERN.fullmatch(line.rstrip("\r"))
    if match:
        level, message = match.groups()
        if level == "ERROR":
            return "ERROR"
        if message == SENT_MESSAGE:
            return "SUCCESS"
        return "INFO"

    if ERROR_MARKER in line:
        return "ERROR"
    if SUCCESS_MARKER in line:
        return "SUCCESS"
    return "INFO"


def list_log_files(log_dir: Path) -> List[Path]:
    """Day-partitioned log files, most recent day first."""
    if not log_dir.is_dir():
        return []
    files = [
        path
        for path in log_dir.iterdir()
        if path.name.startswith(LOG_FILE_PREFIX) and path.is_file()
    ]
    return sorted(files, key=lambda path: path.name, reverse=True)


def read_log_file(path: Path) -> LogFileView:
    # Records are separated by "\n" only; other Unicode line boundaries
    # belong to the record text. A file being appended to may end in a
    # partial line; that's fine here.
    with path.open(encoding="utf-8", errors="replace", newline="") as fh:
        content = fh.read()
    lines = [
        LogLine(text=line, css_class=classify_line(line))
        for line in content.split("\n")
        if line.strip()
    ]
    return LogFileView(name=path.name, lines=lines)


def load_log_files(log_dir: Path) -> List[LogFileView]:
    """
    Read every log file under log_dir. OSError propagates to the caller,
    which decides how to report it.
    """
    views = [read_log_file(path) for path in list_log_files(log_dir)]
    logger.debug("Loaded %d log files from %s", len(views), log_dir)
    return views
