from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from contact_relay.context import AppContext, get_context
from contact_relay.schemas.contact import ContactResponse
from contact_relay.services.submission import handle_submission

logger = logging.getLogger("contact_relay.routers.contact")

router = APIRouter(tags=["Contact"])

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_payload(request: Request) -> Any:
    """
    Body as sent by the form: urlencoded/multipart or JSON. Anything that
    doesn't parse is handed on as an empty payload and fails validation.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPES):
        try:
            form = await request.form()
        except (HTTPException, MultiPartException) as exc:
            # Starlette turns multipart parse errors into a 400 HTTPException.
            logger.debug("Request form body could not be parsed: %s", exc)
            return {}
        return dict(form)

    try:
        return await request.json()
    except ValueError:
        logger.debug("Request body is not valid JSON; treating as empty")
        return {}


@router.post(
    "/send-email",
    response_model=ContactResponse,
    responses={500: {"model": ContactResponse}},
    summary="Relay a contact form submission by email",
)
async def send_email(
    request: Request,
    ctx: AppContext = Depends(get_context),
) -> JSONResponse:
    payload = await _read_payload(request)

    outcome = await handle_submission(
        payload,
        audit_log=ctx.audit_log,
        dispatcher=ctx.dispatcher,
        recipient=ctx.settings.recipient_email,
    )
    logger.debug("Contact submission finished in state %s", outcome.state.value)

    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.response.model_dump(),
    )


__all__ = ["router"]
