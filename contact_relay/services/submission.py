from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Optional

from contact_relay.email.client import DeliveryError, MailDispatcher
from contact_relay.email.service import build_contact_message
from contact_relay.schemas.contact import (
    ContactResponse,
    SubmissionValidationError,
    parse_submission,
)
from contact_relay.services.audit_log import SENT_MESSAGE, AuditLog

logger = logging.getLogger("contact_relay.services.submission")

SUCCESS_MESSAGE: Final[str] = "Thank you! Your message has been sent."

# Validation and delivery failures share a status code; existing form
# clients only distinguish 200 from everything else.
FAILURE_STATUS_CODE: Final[int] = 500


class SubmissionState(str, Enum):
    SENT = "sent"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    state: SubmissionState
    status_code: int
    response: ContactResponse


def _failure(audit_log: AuditLog, exc: Exception, state: SubmissionState) -> SubmissionOutcome:
    reason = str(exc)
    audit_log.error(f"Error in form submission: {reason}")
    return SubmissionOutcome(
        state=state,
        status_code=FAILURE_STATUS_CODE,
        response=ContactResponse(status="error", message=f"Error: {reason}"),
    )


async def handle_submission(
    payload: Any,
    *,
    audit_log: AuditLog,
    dispatcher: MailDispatcher,
    recipient: Optional[str],
) -> SubmissionOutcome:
    """
    Validate one contact form payload and relay it by email.

    Every path writes to the audit log before returning, so the log holds
    one entry per attempt whatever the outcome. Exactly one send is
    attempted per valid payload; nothing is retried.
    """
    audit_log.info("New form submission received")

    try:
        submission = parse_submission(payload)
        audit_log.info(
            f"Form data received - Name: {submission.name}, "
            f"Email: {submission.email}, Phone: {submission.phone}"
        )

        message = build_contact_message(submission, recipient)
        audit_log.info(f"Attempting to send email to: {message.to_address}")

        await dispatcher.send(message)
    except SubmissionValidationError as exc:
        logger.info("Rejected contact form submission: %s", exc)
        return _failure(audit_log, exc, SubmissionState.REJECTED)
    except DeliveryError as exc:
        logger.warning("Contact form delivery failed: %s", exc)
        return _failure(audit_log, exc, SubmissionState.FAILED)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while handling contact form: %s", exc)
        return _failure(audit_log, exc, SubmissionState.FAILED)

    audit_log.info(SENT_MESSAGE)
    return SubmissionOutcome(
        state=SubmissionState.SENT,
        status_code=200,
        response=ContactResponse(status="success", message=SUCCESS_MESSAGE),
    )
