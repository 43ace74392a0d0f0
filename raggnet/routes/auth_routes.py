import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from raggnet.auth.dependencies import security
from raggnet.auth.passwords import verify_password
from raggnet.auth.token_store import TokenStore
from raggnet.core.errors import AuthenticationError, InternalError
from raggnet.database import get_db
from raggnet.models.user import User

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()
    if user is None or not verify_password(data.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")

    try:
        token = TokenStore(db).issue(user.id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError("Could not create a session.") from exc

    logger.info("User %s logged in", user.id)
    return TokenResponse(access_token=token)


@router.put("/token", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
):
    if credentials is not None:
        try:
            TokenStore(db).revoke(credentials.credentials)
        except SQLAlchemyError as exc:
            db.rollback()
            raise InternalError("Could not end the session.") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
