from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Final

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.types import Scope

logger = logging.getLogger("contact_relay.services.render")

PACKAGE_DIR: Final[Path] = Path(__file__).resolve().parent.parent
TEMPLATE_DIR: Final[Path] = PACKAGE_DIR / "templates"

logger.debug("Template dir: %s", TEMPLATE_DIR)

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def render_template(request: Request, name: str, context: Dict[str, Any]) -> HTMLResponse:
    """
    Thin wrapper around Starlette's TemplateResponse so routers render
    Jinja templates with a consistent API. Templates are autoescaped.
    """
    return templates.TemplateResponse(request, name, context)


class PublicStaticFiles(StaticFiles):
    """
    StaticFiles that refuses dotfiles and anything under a dot-directory
    (.env, .git/...), which the served directory may well contain.
    """

    async def get_response(self, path: str, scope: Scope) -> Response:
        if any(part.startswith(".") for part in Path(path).parts):
            logger.debug("Refusing to serve hidden path %s", path)
            raise HTTPException(status_code=404)
        return await super().get_response(path, scope)
