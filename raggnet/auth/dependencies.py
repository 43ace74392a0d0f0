"""
Authorization guards.

A guard takes the request's ``GuardContext`` and raises to stop the pipeline.
``require`` chains guards into a single FastAPI dependency; they run in the
order given and the first failure wins.
"""
import logging
from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from raggnet.auth.roles import Role
from raggnet.auth.token_store import TokenStore
from raggnet.core.errors import AuthenticationError, AuthorizationError
from raggnet.database import get_db
from raggnet.models.user import User

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


@dataclass
class GuardContext:
    request: Request | None
    db: Session
    token: str | None
    user: User | None = None


Guard = Callable[[GuardContext], None]


def login_required(context: GuardContext) -> None:
    if context.user is not None:
        return

    if not context.token:
        logger.debug("Auth failed: no Bearer token in request")
        raise AuthenticationError("Not authenticated. Send header: Authorization: Bearer <token>")

    user_id = TokenStore(context.db).resolve(context.token)
    if user_id is None:
        logger.debug("Auth failed: invalid, revoked or expired token")
        raise AuthenticationError("Invalid or expired token")

    user = context.db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError("User not found")
    context.user = user


def verify_user(context: GuardContext) -> None:
    if context.user is None:
        raise AuthenticationError()

    target_id = context.request.path_params.get("id") if context.request is not None else None
    if context.user.id != target_id:
        raise AuthorizationError("You can only manage your own account.")


def _require_role(context: GuardContext, minimum: Role) -> None:
    login_required(context)
    if not context.user.role_level.meets(minimum):
        raise AuthorizationError(f"{minimum.value} access required.")


def admin_required(context: GuardContext) -> None:
    _require_role(context, Role.ADMIN)


def super_admin_required(context: GuardContext) -> None:
    _require_role(context, Role.SUPER_ADMIN)


def require(*guards: Guard):
    def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
        db: Session = Depends(get_db),
    ) -> User | None:
        context = GuardContext(
            request=request,
            db=db,
            token=credentials.credentials if credentials else None,
        )
        for guard in guards:
            guard(context)
        return context.user

    return dependency
