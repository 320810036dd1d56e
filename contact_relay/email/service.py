from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from contact_relay.schemas.contact import FormSubmission, OutboundMessage

logger = logging.getLogger("contact_relay.email.service")

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

CONTACT_BODY_TEMPLATE = "contact_submission.txt"


class EmailTemplateRenderer:
    """Renders Jinja2-based email templates from the local templates directory."""

    def __init__(self, templates_dir: Path = TEMPLATES_DIR) -> None:
        # Plain-text templates are not autoescaped; only html/xml are.
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        try:
            template = self._env.get_template(template_name)
        except Exception as exc:
            logger.error("Email template '%s' not found: %s", template_name, exc)
            raise

        return template.render(**context)


_default_renderer: Optional[EmailTemplateRenderer] = None


def _renderer() -> EmailTemplateRenderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = EmailTemplateRenderer()
    return _default_renderer


def build_contact_message(
    submission: FormSubmission,
    recipient: Optional[str],
    renderer: Optional[EmailTemplateRenderer] = None,
) -> OutboundMessage:
    """
    Map a validated submission onto the message relayed to the site owner.

    The recipient always comes from configuration so the form can't be used
    to mail arbitrary addresses.
    """
    body = (renderer or _renderer()).render(
        CONTACT_BODY_TEMPLATE,
        {"submission": submission},
    )
    # Headers are single-line; a multi-line name is folded onto one line.
    name = " ".join(submission.name.split())
    return OutboundMessage(
        from_address=submission.email,
        to_address=str(recipient) if recipient else None,
        subject=f"New Contact Form Submission from {name}",
        body=body,
    )
