from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from contact_relay.config import Settings
from contact_relay.email.client import MailDispatcher, build_dispatcher
from contact_relay.services.audit_log import AuditLog


@dataclass
class AppContext:
    """Everything a request handler needs, built once per app."""

    settings: Settings
    audit_log: AuditLog
    dispatcher: MailDispatcher

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        return cls(
            settings=settings,
            audit_log=AuditLog(settings.logs_dir),
            dispatcher=build_dispatcher(settings),
        )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context attached by create_app()."""
    return request.app.state.context
