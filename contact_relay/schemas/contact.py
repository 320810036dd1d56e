from __future__ import annotations

import re
from typing import Any, Final, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# Field names exactly as the marketing form posts them.
REQUIRED_FIELDS: Final[tuple[str, ...]] = ("Name", "Email", "Phone", "Message")

# something@domain.tld, no whitespace anywhere, exactly one "@".
EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MISSING_FIELDS_MESSAGE: Final[str] = "Required fields are missing"
INVALID_EMAIL_MESSAGE: Final[str] = "Invalid email format"


class SubmissionValidationError(ValueError):
    """Raised when a contact form payload is incomplete or malformed."""


class FormSubmission(BaseModel):
    """A contact form payload that passed validation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="Name")
    email: str = Field(alias="Email")
    phone: str = Field(alias="Phone")
    message: str = Field(alias="Message")


class OutboundMessage(BaseModel):
    """The message handed to a mail dispatcher."""

    model_config = ConfigDict(frozen=True)

    from_address: str
    to_address: Optional[str] = None
    subject: str
    body: str


class ContactResponse(BaseModel):
    status: Literal["success", "error"]
    message: str


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def parse_submission(payload: Any) -> FormSubmission:
    """
    Turn an untrusted request body into a FormSubmission.

    Presence is checked for all four fields before the email format, so an
    incomplete form always reports missing fields first. Falsy values
    (None, "", 0, False) count as missing. Phone is accepted as opaque text.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    values = {field: payload.get(field) for field in REQUIRED_FIELDS}
    if not all(values.values()):
        raise SubmissionValidationError(MISSING_FIELDS_MESSAGE)

    fields = {field: _as_text(value) for field, value in values.items()}
    if not EMAIL_PATTERN.fullmatch(fields["Email"]):
        raise SubmissionValidationError(INVALID_EMAIL_MESSAGE)

    return FormSubmission.model_validate(fields)
