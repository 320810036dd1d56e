from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from contact_relay.config import Settings
from contact_relay.context import AppContext
from contact_relay.email.client import DeliveryError
from contact_relay.main import create_app
from contact_relay.schemas.contact import OutboundMessage
from contact_relay.services.audit_log import AuditLog

RECIPIENT = "owner@example.com"

VALID_FORM = {
    "Name": "Ada Lovelace",
    "Email": "ada@example.com",
    "Phone": "+44 20 7946 0000",
    "Message": "I'd like a quote for the analytical engine.",
}


class FakeDispatcher:
    """Records messages; fails with DeliveryError(error) when error is set."""

    def __init__(
        self,
        error: Optional[str] = None,
        verify_error: Optional[str] = None,
    ) -> None:
        self.error = error
        self.verify_error = verify_error
        self.sent: List[OutboundMessage] = []
        self.verify_calls = 0

    async def verify(self) -> None:
        self.verify_calls += 1
        if self.verify_error:
            raise DeliveryError(self.verify_error)

    async def send(self, message: OutboundMessage) -> None:
        self.sent.append(message)
        if self.error:
            raise DeliveryError(self.error)


def audit_lines(audit_log: AuditLog) -> List[str]:
    path = audit_log.current_path()
    if not path.exists():
        return []
    return [line for line in path.read_text(encoding="utf-8").split("\n") if line]


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>Contact us</h1>", encoding="utf-8")
    return public


@pytest.fixture
def settings(tmp_path: Path, static_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        LOGS_DIR=tmp_path / "logs",
        STATIC_DIR=static_dir,
        RECIPIENT_EMAIL=RECIPIENT,
    )


@pytest.fixture
def audit_log(settings: Settings) -> AuditLog:
    return AuditLog(settings.logs_dir)


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def context(settings: Settings, audit_log: AuditLog, dispatcher: FakeDispatcher) -> AppContext:
    return AppContext(settings=settings, audit_log=audit_log, dispatcher=dispatcher)


@pytest.fixture
def client(context: AppContext) -> TestClient:
    return TestClient(create_app(context))
