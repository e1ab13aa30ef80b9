"""Request gate: resolves the principal behind a bearer token.

The gate is an ordered tuple of interceptors. Each one receives the
GateContext, fills in what it is responsible for and hands it on, or raises
one of the 401/403 errors from taskdesk.utils.errors, which ends the request.

    extract_bearer -> verify_credential -> resolve_principal [-> require_admin]
"""
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
import structlog
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from taskdesk.database import get_db
from taskdesk.models.user import User
from taskdesk.utils.auth import decode_token
from taskdesk.utils.errors import (
    ApiError,
    Forbidden,
    MalformedCredential,
    PrincipalNotFound,
    Unauthenticated,
)

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Principal:
    id: int
    username: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass
class GateContext:
    authorization: Optional[str]
    db: Optional[Session] = None
    token: Optional[str] = None
    user_id: Optional[int] = None
    principal: Optional[Principal] = None


Interceptor = Callable[[GateContext], GateContext]


def extract_bearer(ctx: GateContext) -> GateContext:
    header = ctx.authorization
    if not header:
        raise Unauthenticated()
    # a bare "Bearer" may arrive with its trailing space stripped by the transport
    if not header.startswith(BEARER_PREFIX) and header.rstrip() != BEARER_PREFIX.rstrip():
        raise MalformedCredential()
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated("No token provided")
    ctx.token = token
    return ctx


def verify_credential(ctx: GateContext) -> GateContext:
    ctx.user_id = decode_token(ctx.token)
    return ctx


def resolve_principal(ctx: GateContext) -> GateContext:
    row = (
        ctx.db.query(User.id, User.username, User.email, User.role)
        .filter(User.id == ctx.user_id)
        .first()
    )
    if row is None:
        raise PrincipalNotFound()
    ctx.principal = Principal(id=row.id, username=row.username, email=row.email, role=row.role)
    return ctx


def require_admin(ctx: GateContext) -> GateContext:
    if not ctx.principal.is_admin:
        raise Forbidden("Access denied. Admin only.")
    return ctx


AUTHENTICATED: Sequence[Interceptor] = (extract_bearer, verify_credential, resolve_principal)
ADMIN_ONLY: Sequence[Interceptor] = (*AUTHENTICATED, require_admin)


def run_gate(interceptors: Sequence[Interceptor], ctx: GateContext) -> Principal:
    try:
        for intercept in interceptors:
            ctx = intercept(ctx)
    except ApiError as exc:
        logger.warning("auth.rejected", reason=type(exc).__name__, status=exc.status_code)
        raise
    return ctx.principal


def get_current_user(authorization: Optional[str] = Header(None), db: Session = Depends(get_db)) -> Principal:
    return run_gate(AUTHENTICATED, GateContext(authorization=authorization, db=db))


def get_admin_user(authorization: Optional[str] = Header(None), db: Session = Depends(get_db)) -> Principal:
    return run_gate(ADMIN_ONLY, GateContext(authorization=authorization, db=db))
