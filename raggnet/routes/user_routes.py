import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from raggnet.auth.dependencies import admin_required, login_required, require, verify_user
from raggnet.auth.passwords import hash_password
from raggnet.auth.roles import Role
from raggnet.auth.token_store import TokenStore
from raggnet.core.errors import InternalError, NotFoundError, ValidationError
from raggnet.core.validators import is_valid_email, is_valid_phone, valid_id
from raggnet.database import get_db
from raggnet.models.user import User

router = APIRouter(tags=['users'])
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


class UserPayload(BaseModel):
    email: str | None = None
    password: str | None = None
    phone: str | None = None
    name: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        if not is_valid_email(normalized):
            raise ValueError('Invalid email')
        return normalized

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not is_valid_phone(normalized):
            raise ValueError('Invalid phone')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str | None) -> str | None:
        if value is not None and len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value


class CreateUserRequest(UserPayload):
    email: str
    password: str


class UpdateUserRequest(UserPayload):
    pass


class UserResponse(BaseModel):
    id: str
    email: str
    phone: str | None = None
    name: str | None = None
    role: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


def get_user_or_404(user_id: str, db: Session) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError('User not found.')
    return user


def email_taken(email: str, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError('Email already registered') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError(f'Could not {action}.') from exc


@router.get('', response_model=list[UserResponse])
def list_users(
    current_user: User = Depends(require(admin_required)),
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return db.query(User).order_by(User.created_at, User.id).offset(skip).limit(limit).all()


@router.post('', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(data: CreateUserRequest, db: Session = Depends(get_db)):
    if email_taken(data.email, db):
        raise ValidationError('Email already registered')

    user = User(
        email=data.email,
        phone=data.phone,
        name=data.name,
        hashed_password=hash_password(data.password),
        role=Role.USER.value,
    )
    db.add(user)
    _commit(db, 'create user')
    db.refresh(user)

    logger.info('Created user %s', user.id)
    return user


@router.get('/{id}', response_model=UserResponse)
def get_user(
    user_id: str = Depends(valid_id),
    current_user: User = Depends(require(admin_required)),
    db: Session = Depends(get_db),
):
    return get_user_or_404(user_id, db)


@router.put('/{id}', response_model=UserResponse)
def update_user(
    data: UpdateUserRequest,
    user_id: str = Depends(valid_id),
    current_user: User = Depends(require(login_required, verify_user)),
    db: Session = Depends(get_db),
):
    user = get_user_or_404(user_id, db)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if 'email' in changes and email_taken(changes['email'], db, exclude_id=user.id):
        raise ValidationError('Email already registered')

    password = changes.pop('password', None)
    if password is not None:
        user.hashed_password = hash_password(password)
    for field, value in changes.items():
        setattr(user, field, value)

    _commit(db, 'update user')
    db.refresh(user)
    return user


@router.delete('/{id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str = Depends(valid_id),
    current_user: User = Depends(require(login_required, verify_user)),
    db: Session = Depends(get_db),
):
    user = get_user_or_404(user_id, db)
    try:
        TokenStore(db).revoke_all(user.id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError('Could not delete user.') from exc

    logger.info('Deleted user %s', user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
