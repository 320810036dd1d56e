from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv

# Load .env into os.environ before settings are read.
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contact_relay.config import get_settings
from contact_relay.context import AppContext
from contact_relay.routers import contact as contact_router
from contact_relay.routers import health as health_router
from contact_relay.routers import logs as logs_router
from contact_relay.services.render import PublicStaticFiles

logger = logging.getLogger("contact_relay.main")


async def verify_mail_transport(ctx: AppContext) -> bool:
    """
    Check the mail transport once at startup. A failure is recorded in the
    audit log but the HTTP surface keeps serving.
    """
    try:
        await ctx.dispatcher.verify()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Mail transport verification failed: %s", exc)
        ctx.audit_log.error(f"Email configuration error: {exc}")
        return False

    ctx.audit_log.info("Server is ready to send emails")
    return True


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    if context is None:
        context = AppContext.from_settings(get_settings())
    settings = context.settings

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(contact_router.router)
    app.include_router(logs_router.router)
    app.include_router(health_router.router)

    # Static files last so the routes above take precedence.
    if settings.static_dir.is_dir():
        app.mount(
            "/",
            PublicStaticFiles(directory=str(settings.static_dir), html=True),
            name="static",
        )
    else:
        logger.warning("Static directory %s not found; not serving static files", settings.static_dir)

    @app.on_event("startup")
    async def on_startup() -> None:
        logger.info("Starting %s...", settings.app_name)
        await verify_mail_transport(context)
        context.audit_log.info("Server started")
        logger.info("%s started (logs in %s).", settings.app_name, context.audit_log.log_dir)

    return app


app = create_app()
