import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from raggnet.auth.dependencies import require, super_admin_required
from raggnet.auth.passwords import hash_password
from raggnet.auth.roles import Role
from raggnet.core import config
from raggnet.core.errors import InternalError, NotFoundError
from raggnet.core.validators import is_valid_id
from raggnet.database import get_db
from raggnet.models.resource import ApprovalStatus, Resource
from raggnet.models.user import User
from raggnet.routes.resource_routes import ResourceResponse
from raggnet.routes.user_routes import UserResponse

router = APIRouter(tags=['admins'])
logger = logging.getLogger(__name__)


class CreateAdminRequest(BaseModel):
    user_id: str

    @field_validator('user_id')
    @classmethod
    def validate_user_id(cls, value: str) -> str:
        normalized = value.strip()
        if not is_valid_id(normalized):
            raise ValueError('Invalid ID')
        return normalized


@router.post('', response_model=UserResponse)
def create_admin(
    data: CreateAdminRequest,
    current_user: User = Depends(require(super_admin_required)),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == data.user_id).first()
    if user is None:
        raise NotFoundError('User not found.')

    if user.role_level.meets(Role.ADMIN):
        return user

    user.role = Role.ADMIN.value
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError('Could not promote user.') from exc
    db.refresh(user)

    logger.info('User %s promoted %s to admin', current_user.id, user.id)
    return user


@router.get('/resources', response_model=list[ResourceResponse])
def list_unapproved_resources(
    current_user: User = Depends(require(super_admin_required)),
    db: Session = Depends(get_db),
):
    return (
        db.query(Resource)
        .filter(Resource.status == ApprovalStatus.PENDING.value)
        .order_by(Resource.created_at, Resource.id)
        .all()
    )


def seed_super_admin(db: Session) -> User | None:
    """Create or elevate the account named by SUPER_ADMIN_EMAIL."""
    email = config.SUPER_ADMIN_EMAIL.strip().lower()
    if not email:
        return None

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        if not config.SUPER_ADMIN_PASSWORD:
            logger.warning('SUPER_ADMIN_EMAIL is set without SUPER_ADMIN_PASSWORD; skipping super-admin seed.')
            return None
        user = User(
            email=email,
            hashed_password=hash_password(config.SUPER_ADMIN_PASSWORD),
            role=Role.SUPER_ADMIN.value,
        )
        db.add(user)
        logger.info('Seeding super-admin account %s', email)
    elif user.role != Role.SUPER_ADMIN.value:
        user.role = Role.SUPER_ADMIN.value
        logger.info('Elevating %s to super-admin', email)
    else:
        return user

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception('Super-admin seed failed. Check DATABASE_URL and database credentials.')
        return None
    db.refresh(user)
    return user
