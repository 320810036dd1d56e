from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Console logging for application diagnostics.

    The audit trail written for every submission lives in
    services/audit_log.py and does not go through the root logger.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("contact_relay").setLevel(resolved)
