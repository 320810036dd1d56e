from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from contact_relay.context import AppContext, get_context
from contact_relay.services.log_viewer import load_log_files
from contact_relay.services.render import render_template

logger = logging.getLogger("contact_relay.routers.logs")

router = APIRouter(tags=["Logs"])


@router.get("/view-logs", response_class=HTMLResponse)
def view_logs(
    request: Request,
    ctx: AppContext = Depends(get_context),
) -> Response:
    """
    Every day's audit log, most recent first, one colored line per entry.
    """
    try:
        log_files = load_log_files(ctx.audit_log.log_dir)
        return render_template(request, "email_logs.html", {"log_files": log_files})
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to load logs from %s: %s", ctx.audit_log.log_dir, exc)
        return PlainTextResponse("Error loading logs", status_code=500)


__all__ = ["router"]
