from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from contact_relay.context import AppContext
from contact_relay.main import create_app
from contact_relay.services.audit_log import AuditLog
from contact_relay.services.log_viewer import classify_line, list_log_files, read_log_file

from conftest import VALID_FORM, FakeDispatcher, audit_lines


@pytest.mark.parametrize(
    "line, expected",
    [
        ("[2024-05-01T09:00:00.000Z] [ERROR] Error in form submission: x", "ERROR"),
        ("[2024-05-01T09:00:00.000Z] [INFO] Email sent successfully", "SUCCESS"),
        ("[2024-05-01T09:00:00.000Z] [INFO] New form submission received", "INFO"),
        ("[2024-05-01T09:00:00.000Z] [ERROR] message sent successfully? no", "ERROR"),
    ],
)
def test_classify_line(line: str, expected: str) -> None:
    assert classify_line(line) == expected


def test_empty_log_directory(client: TestClient, audit_log: AuditLog) -> None:
    audit_log.log_dir.mkdir(parents=True)

    response = client.get("/view-logs")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "No logs found." in response.text
    assert 'class="log-file"' not in response.text


def test_missing_log_directory(client: TestClient) -> None:
    response = client.get("/view-logs")

    assert response.status_code == 200
    assert "No logs found." in response.text


def test_files_are_listed_most_recent_first(client: TestClient, audit_log: AuditLog) -> None:
    log_dir = audit_log.log_dir
    log_dir.mkdir(parents=True)
    (log_dir / "email_2024-01-01.log").write_text("[t] [INFO] older\n", encoding="utf-8")
    (log_dir / "email_2024-01-02.log").write_text(
        "[t] [INFO] newer\n\n   \n[t] [ERROR] broke\n", encoding="utf-8"
    )
    (log_dir / "notes.txt").write_text("[t] [INFO] ignored\n", encoding="utf-8")

    assert [p.name for p in list_log_files(log_dir)] == [
        "email_2024-01-02.log",
        "email_2024-01-01.log",
    ]

    html = client.get("/view-logs").text
    assert html.index("email_2024-01-02.log") < html.index("email_2024-01-01.log")
    assert "ignored" not in html
    assert html.count('class="log-entry ') == 3
    assert '<div class="log-entry ERROR">[t] [ERROR] broke</div>' in html
    assert "No logs found." not in html


def test_round_trip_counts(client: TestClient, audit_log: AuditLog) -> None:
    valid, invalid = 3, 2
    for i in range(valid):
        assert client.post("/send-email", json={**VALID_FORM, "Name": f"Sender {i}"}).status_code == 200
    for _ in range(invalid):
        assert client.post("/send-email", json={**VALID_FORM, "Email": "plaintext"}).status_code == 500

    assert len(audit_lines(audit_log)) >= 2 * valid + invalid

    html = client.get("/view-logs").text
    assert html.count('class="log-entry SUCCESS"') == valid
    assert html.count('class="log-entry ERROR"') == invalid


def test_submitted_text_is_escaped(client: TestClient) -> None:
    client.post("/send-email", json={**VALID_FORM, "Name": "<script>alert(1)</script>"})

    html = client.get("/view-logs").text
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_rendering_is_idempotent(client: TestClient) -> None:
    client.post("/send-email", json=VALID_FORM)
    client.post("/send-email", json={})

    first = client.get("/view-logs")
    second = client.get("/view-logs")
    assert first.content == second.content


def test_read_failure_returns_plain_text(client: TestClient, monkeypatch) -> None:
    def broken(log_dir: Path):
        raise PermissionError(f"cannot read {log_dir}")

    monkeypatch.setattr("contact_relay.routers.logs.load_log_files", broken)

    response = client.get("/view-logs")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "Error loading logs"


@pytest.mark.parametrize(
    "line, expected",
    [
        ("[t] [INFO] Form data received - Name: Email sent successfully, Email: a@b.co, Phone: 1", "INFO"),
        ("[t] [INFO] Form data received - Name: [ERROR], Email: a@b.co, Phone: 1", "INFO"),
        ("[t] [INFO] Form data received - Name: Ada, Email: a@b.co, Phone: ] [INFO] Email sent successfully", "INFO"),
        ("[t] [INFO] Email sent successfully\r", "SUCCESS"),
        ("free text that was sent successfully", "SUCCESS"),
        ("free text with an [ERROR] marker", "ERROR"),
    ],
)
def test_submitted_text_cannot_change_a_record_class(line: str, expected: str) -> None:
    assert classify_line(line) == expected


def test_only_newlines_separate_records(tmp_path: Path) -> None:
    log_file = tmp_path / "email_2024-01-01.log"
    log_file.write_text(
        "[t] [ERROR] Error in form submission: Ada\u2028Email sent successfully\x85x\x0cy\n"
        "[t] [INFO] next\n",
        encoding="utf-8",
    )

    view = read_log_file(log_file)

    assert [line.css_class for line in view.lines] == ["ERROR", "INFO"]


def test_unicode_line_breaks_in_a_failed_submission(
    context: AppContext, audit_log: AuditLog
) -> None:
    context.dispatcher = FakeDispatcher(error="SMTP timeout")
    client = TestClient(create_app(context))

    response = client.post(
        "/send-email",
        json={**VALID_FORM, "Name": "Ada\u2028Email sent successfully"},
    )
    assert response.status_code == 500

    records = audit_lines(audit_log)
    html = client.get("/view-logs").text
    assert html.count('class="log-entry ') == len(records) == 4
    assert html.count('class="log-entry SUCCESS"') == 0
    assert html.count('class="log-entry ERROR"') == 1
