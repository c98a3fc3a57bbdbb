from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Cookie, Depends, Form, Header, Request
from fastapi.responses import JSONResponse

from .assembler import ThemeAssembler
from .assistant import AssistantProxy
from .auth import MANAGE_OPTIONS, create_nonce, decode_token, has_capability, parse_bearer_token, verify_nonce
from .config import GenieSettings
from .errors import InvalidInput, StorageError, ThemeAlreadyExists
from .sanitize import sanitize_text_field
from .schemas import ExportIn, GenerateOut, NonceOut, SendIn, SettingsIn
from .store import API_KEY_OPTION, OptionStore
from .theme_data import ThemeRequest

logger = logging.getLogger(__name__)

NOT_ALLOWED = "Sorry, you are not allowed to do that."
NO_PERMISSION = "You do not have permission to generate themes."
BAD_NONCE = "Security check failed. Please refresh the page and try again."

_FAILURE_STATUS = {InvalidInput: 400, ThemeAlreadyExists: 409, StorageError: 500}


def _auth_header(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    access_token: Optional[str] = Cookie(default=None),
) -> Optional[str]:
    # Prefer Bearer token from Authorization; fallback to access_token cookie
    token = parse_bearer_token(authorization)
    if token:
        return token
    if access_token:
        return access_token
    return request.cookies.get("access_token") or None


def create_geniewp_router(
    settings: GenieSettings,
    store: OptionStore,
    *,
    assembler: Optional[ThemeAssembler] = None,
    proxy: Optional[AssistantProxy] = None,
) -> APIRouter:
    ns = settings.namespace
    r = APIRouter(prefix=f"/{ns}", tags=[ns])
    assembler = assembler or ThemeAssembler(settings, store)
    proxy = proxy or AssistantProxy(settings, store)
    admin = settings.admin_url.rstrip("/")

    def _claims(token: Optional[str]) -> Optional[Dict[str, Any]]:
        if not settings.require_auth:
            return {"sub": "0", "caps": [MANAGE_OPTIONS]}
        if not token:
            return None
        return decode_token(token, settings.secret_key, [settings.algorithm])

    def _rest_forbidden() -> JSONResponse:
        return JSONResponse(status_code=403, content={"success": False, "data": {"message": NOT_ALLOWED}})

    def _can_manage(token: Optional[str]) -> bool:
        return has_capability(_claims(token), MANAGE_OPTIONS)

    @r.post("/v1/send")
    def send(payload: SendIn, token: Optional[str] = Depends(_auth_header)):
        if not _can_manage(token):
            return _rest_forbidden()
        return proxy.send(payload.step, payload.message, payload.template)

    @r.get("/v1/status")
    def status(thread_id: str, run_id: str, token: Optional[str] = Depends(_auth_header)):
        if not _can_manage(token):
            return _rest_forbidden()
        return proxy.status(thread_id, run_id)

    @r.get("/v1/get")
    def get(thread_id: str, token: Optional[str] = Depends(_auth_header)):
        if not _can_manage(token):
            return _rest_forbidden()
        return proxy.get(thread_id)

    @r.get("/v1/templates")
    def templates(token: Optional[str] = Depends(_auth_header)):
        if not _can_manage(token):
            return _rest_forbidden()
        return proxy.templates()

    @r.post("/v1/export")
    def export(payload: ExportIn, token: Optional[str] = Depends(_auth_header)):
        if not _can_manage(token):
            return _rest_forbidden()
        return proxy.export(payload.title, payload.description, payload.images, payload.slug)

    @r.post("/v1/settings")
    def save_settings(payload: SettingsIn, token: Optional[str] = Depends(_auth_header)):
        if not _can_manage(token):
            return _rest_forbidden()
        store.set_option(API_KEY_OPTION, sanitize_text_field(payload.api_key))
        return {"success": True, "data": {"message": "Settings saved."}}

    @r.get("/nonce", response_model=NonceOut)
    def nonce(token: Optional[str] = Depends(_auth_header)):
        claims = _claims(token)
        if not has_capability(claims, MANAGE_OPTIONS):
            return JSONResponse(status_code=403, content={"success": False, "message": NO_PERMISSION})
        value = create_nonce(
            claims["sub"],
            settings.secret_key,
            algorithm=settings.algorithm,
            expires_minutes=settings.nonce_expire_minutes,
        )
        return NonceOut(nonce=value)

    @r.post("/generate-theme")
    def generate_theme(
        site_name: str = Form(default=""),
        business_type: str = Form(default=""),
        tagline: str = Form(default=""),
        description: str = Form(default=""),
        primary_color: str = Form(default=""),
        secondary_color: str = Form(default=""),
        nonce: str = Form(default=""),
        token: Optional[str] = Depends(_auth_header),
    ):
        claims = _claims(token)
        if settings.require_auth and not verify_nonce(
            nonce, str((claims or {}).get("sub", "")), settings.secret_key, algorithm=settings.algorithm
        ):
            return JSONResponse(status_code=403, content={"success": False, "message": BAD_NONCE})
        if not has_capability(claims, MANAGE_OPTIONS):
            return JSONResponse(status_code=403, content={"success": False, "message": NO_PERMISSION})

        # assemble() sanitizes the request
        req = ThemeRequest(
            site_name=site_name,
            business_type=business_type,
            tagline=tagline,
            description=description,
            primary_color=primary_color,
            secondary_color=secondary_color,
        )
        try:
            theme = assembler.assemble(req)
        except (InvalidInput, ThemeAlreadyExists, StorageError) as e:
            logger.warning("Theme generation failed: %s", e)
            code = next(c for t, c in _FAILURE_STATUS.items() if isinstance(e, t))
            return JSONResponse(status_code=code, content={"success": False, "message": str(e)})

        out = GenerateOut(
            success=True,
            message=f'Theme "{theme.name}" created successfully!',
            theme_slug=theme.slug,
            theme_name=theme.name,
            activate_url=f"{admin}/themes.php",
            customize_url=f"{admin}/customize.php?theme={theme.slug}",
            ai_enhanced=theme.ai_enhanced,
        )
        return out.public()

    return r
