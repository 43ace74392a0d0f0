import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from raggnet.auth.dependencies import admin_required, require, super_admin_required
from raggnet.core import config
from raggnet.core.errors import InternalError, NotFoundError, ValidationError
from raggnet.core.validators import normalize_url, valid_id
from raggnet.database import get_db, utcnow
from raggnet.models.resource import ApprovalStatus, Resource, ResourceType
from raggnet.models.user import User

router = APIRouter(tags=['resources'])
logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200
MAX_TITLE_LENGTH = 200


class ResourcePayload(BaseModel):
    title: str | None = None
    type: ResourceType | None = None
    url: str | None = None
    description: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Title is required.')
        if len(normalized) > MAX_TITLE_LENGTH:
            raise ValueError(f'Title must be {MAX_TITLE_LENGTH} characters or fewer.')
        return normalized

    @field_validator('url')
    @classmethod
    def validate_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalize_url(normalized)


class CreateResourceRequest(ResourcePayload):
    title: str
    type: ResourceType = ResourceType.OTHER


class UpdateResourceRequest(ResourcePayload):
    pass


class ResourceResponse(BaseModel):
    id: str
    title: str
    type: ResourceType
    url: str | None = None
    description: str | None = None
    submitted_by: str | None = None
    status: ApprovalStatus
    created_at: datetime | None = None
    approved_at: datetime | None = None

    class Config:
        from_attributes = True


def get_resource_or_404(resource_id: str, db: Session) -> Resource:
    resource = db.query(Resource).filter(Resource.id == resource_id).first()
    if resource is None:
        raise NotFoundError('Resource not found.')
    return resource


def query_resources(
    db: Session,
    status: ApprovalStatus | None = None,
    resource_type: ResourceType | None = None,
    skip: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
) -> list[Resource]:
    query = db.query(Resource)
    if status is not None:
        query = query.filter(Resource.status == status.value)
    if resource_type is not None:
        query = query.filter(Resource.type == resource_type.value)
    return query.order_by(Resource.created_at.desc(), Resource.id).offset(skip).limit(limit).all()


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError(f'Could not {action}.') from exc


@router.get('', response_model=list[ResourceResponse])
def list_resources(
    type: ResourceType | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return query_resources(db, status=ApprovalStatus.APPROVED, resource_type=type, skip=skip, limit=limit)


@router.post('', response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
def create_resource(
    data: CreateResourceRequest,
    current_user: User = Depends(require(admin_required)),
    db: Session = Depends(get_db),
):
    resource = Resource(
        title=data.title,
        type=data.type.value,
        url=data.url,
        description=data.description,
        submitted_by=current_user.id,
        status=ApprovalStatus.PENDING.value,
    )
    db.add(resource)
    _commit(db, 'create resource')
    db.refresh(resource)

    logger.info('User %s submitted resource %s (%s)', current_user.id, resource.id, resource.status)
    return resource


@router.get('/books', response_model=list[ResourceResponse])
def list_books(
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return query_resources(db, status=ApprovalStatus.APPROVED, resource_type=ResourceType.BOOK, skip=skip, limit=limit)


@router.get('/courses', response_model=list[ResourceResponse])
def list_courses(
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return query_resources(db, status=ApprovalStatus.APPROVED, resource_type=ResourceType.COURSE, skip=skip, limit=limit)


@router.get('/{id}', response_model=ResourceResponse)
def get_resource(resource_id: str = Depends(valid_id), db: Session = Depends(get_db)):
    return get_resource_or_404(resource_id, db)


@router.put('/{id}', response_model=ResourceResponse)
def update_resource(
    data: UpdateResourceRequest,
    resource_id: str = Depends(valid_id),
    current_user: User = Depends(require(admin_required)),
    db: Session = Depends(get_db),
):
    resource = get_resource_or_404(resource_id, db)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError('No fields to update.')

    for field, value in changes.items():
        setattr(resource, field, value.value if isinstance(value, ResourceType) else value)

    _commit(db, 'update resource')
    db.refresh(resource)
    return resource


@router.post('/{id}', response_model=ResourceResponse)
def approve_resource(
    resource_id: str = Depends(valid_id),
    current_user: User = Depends(require(super_admin_required)),
    db: Session = Depends(get_db),
):
    resource = get_resource_or_404(resource_id, db)
    if resource.status == ApprovalStatus.APPROVED.value:
        return resource

    resource.status = ApprovalStatus.APPROVED.value
    resource.approved_at = utcnow()
    _commit(db, 'approve resource')
    db.refresh(resource)

    logger.info('User %s approved resource %s', current_user.id, resource.id)
    return resource


@router.delete('/{id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(
    resource_id: str = Depends(valid_id),
    current_user: User = Depends(require(super_admin_required)),
    db: Session = Depends(get_db),
):
    resource = get_resource_or_404(resource_id, db)
    db.delete(resource)
    _commit(db, 'delete resource')

    logger.info('User %s deleted resource %s', current_user.id, resource_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get('/{id}/other-resources', response_model=list[ResourceResponse])
def get_other_resources(resource_id: str = Depends(valid_id), db: Session = Depends(get_db)):
    resource = get_resource_or_404(resource_id, db)

    related = [Resource.type == resource.type]
    if resource.submitted_by is not None:
        related.append(Resource.submitted_by == resource.submitted_by)

    return (
        db.query(Resource)
        .filter(
            Resource.id != resource.id,
            Resource.status == ApprovalStatus.APPROVED.value,
            or_(*related),
        )
        .order_by(Resource.created_at.desc(), Resource.id)
        .limit(config.RELATED_RESOURCES_LIMIT)
        .all()
    )
