"""FastAPI glue shared by every router: error mapping and request identity.

Authentication lives in front of this service; it forwards the caller as
``X-User-Id`` (and ``X-User-Role`` for staff).
"""

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from shared.database import Database
from shared.errors import StorefrontError


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:  # noqa: ARG001
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_checkout(request: Request):
    return request.app.state.checkout


def current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def require_admin(x_user_role: str | None = Header(default=None)) -> str:
    if (x_user_role or "").lower() != "admin":
        raise HTTPException(status_code=403, detail="Admin role required")
    return x_user_role
