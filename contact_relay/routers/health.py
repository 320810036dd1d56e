from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends

from contact_relay.context import AppContext, get_context

router = APIRouter(tags=["Health"])


@router.get("/healthz")
async def healthcheck(ctx: AppContext = Depends(get_context)) -> Dict[str, str]:
    return {"status": "ok", "app": ctx.settings.app_name}
