import pytest
from fastapi import HTTPException

from raggnet.auth.roles import Role
from raggnet.core import config
from raggnet.models.resource import ApprovalStatus, Resource, ResourceType
from raggnet.routes.resource_routes import (
    CreateResourceRequest,
    UpdateResourceRequest,
    approve_resource,
    create_resource,
    delete_resource,
    get_other_resources,
    get_resource,
    list_books,
    list_courses,
    list_resources,
    update_resource,
)

UNKNOWN_ID = '5c8a1d5b0190b214360dc031'


def test_create_resource_request_repairs_url_without_scheme() -> None:
    request = CreateResourceRequest(title='SICP', type='book', url='mitpress.mit.edu/sicp')

    assert request.url == 'http://mitpress.mit.edu/sicp'


def test_create_resource_request_keeps_url_with_scheme() -> None:
    request = CreateResourceRequest(title='SICP', type='book', url='https://mitpress.mit.edu/sicp')

    assert request.url == 'https://mitpress.mit.edu/sicp'


@pytest.mark.parametrize('role', [Role.ADMIN, Role.SUPER_ADMIN])
def test_create_resource_is_pending_for_every_submitter(db, make_user, role) -> None:
    submitter = make_user(role=role)

    resource = create_resource(
        CreateResourceRequest(title='Intro to Databases', type='course'),
        current_user=submitter,
        db=db,
    )

    assert resource.status == ApprovalStatus.PENDING.value
    assert resource.submitted_by == submitter.id
    assert resource.approved_at is None


def test_approve_resource_is_one_way_and_idempotent(db, make_user, make_resource) -> None:
    root = make_user(role=Role.SUPER_ADMIN)
    resource = make_resource(status=ApprovalStatus.PENDING)

    approved = approve_resource(resource_id=resource.id, current_user=root, db=db)
    first_approved_at = approved.approved_at
    approved_again = approve_resource(resource_id=resource.id, current_user=root, db=db)

    assert approved.status == ApprovalStatus.APPROVED.value
    assert approved_again.status == ApprovalStatus.APPROVED.value
    assert approved_again.approved_at == first_approved_at


def test_approve_resource_returns_404_when_missing(db, make_user) -> None:
    root = make_user(role=Role.SUPER_ADMIN)

    with pytest.raises(HTTPException) as exception_info:
        approve_resource(resource_id=UNKNOWN_ID, current_user=root, db=db)

    assert exception_info.value.status_code == 404


def test_get_resource_returns_404_when_missing(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_resource(resource_id=UNKNOWN_ID, db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Resource not found.'


def test_list_resources_only_shows_approved(db, make_resource) -> None:
    approved = make_resource(title='Approved')
    make_resource(title='Pending', status=ApprovalStatus.PENDING)

    listed = list_resources(type=None, skip=0, limit=50, db=db)

    assert [resource.id for resource in listed] == [approved.id]


def test_list_resources_filters_by_type(db, make_resource) -> None:
    make_resource(title='A book', resource_type=ResourceType.BOOK)
    course = make_resource(title='A course', resource_type=ResourceType.COURSE)

    listed = list_resources(type=ResourceType.COURSE, skip=0, limit=50, db=db)

    assert [resource.id for resource in listed] == [course.id]


def test_list_books_and_courses(db, make_resource) -> None:
    book = make_resource(title='A book', resource_type=ResourceType.BOOK)
    course = make_resource(title='A course', resource_type=ResourceType.COURSE)
    make_resource(title='A video', resource_type=ResourceType.OTHER)
    make_resource(title='Pending book', resource_type=ResourceType.BOOK, status=ApprovalStatus.PENDING)

    assert [resource.id for resource in list_books(skip=0, limit=50, db=db)] == [book.id]
    assert [resource.id for resource in list_courses(skip=0, limit=50, db=db)] == [course.id]


def test_update_resource_merges_fields_and_keeps_status(db, make_user, make_resource) -> None:
    admin = make_user(role=Role.ADMIN)
    resource = make_resource(title='Old title', status=ApprovalStatus.PENDING)

    updated = update_resource(
        UpdateResourceRequest(title='New title', url='example.com/new'),
        resource_id=resource.id,
        current_user=admin,
        db=db,
    )

    assert updated.title == 'New title'
    assert updated.url == 'http://example.com/new'
    assert updated.type == ResourceType.BOOK.value
    assert updated.status == ApprovalStatus.PENDING.value


def test_update_resource_rejects_empty_body(db, make_user, make_resource) -> None:
    admin = make_user(role=Role.ADMIN)
    resource = make_resource()

    with pytest.raises(HTTPException) as exception_info:
        update_resource(UpdateResourceRequest(), resource_id=resource.id, current_user=admin, db=db)

    assert exception_info.value.status_code == 400


def test_delete_resource_hard_deletes(db, make_user, make_resource) -> None:
    root = make_user(role=Role.SUPER_ADMIN)
    resource = make_resource()

    response = delete_resource(resource_id=resource.id, current_user=root, db=db)

    assert response.status_code == 204
    assert db.query(Resource).filter(Resource.id == resource.id).first() is None


def test_other_resources_share_type_or_submitter(db, make_user, make_resource) -> None:
    author = make_user()
    resource = make_resource(title='Base', resource_type=ResourceType.BOOK, submitted_by=author.id)
    same_type = make_resource(title='Same type', resource_type=ResourceType.BOOK)
    same_author = make_resource(title='Same author', resource_type=ResourceType.COURSE, submitted_by=author.id)
    make_resource(title='Unrelated', resource_type=ResourceType.COURSE)
    make_resource(title='Pending sibling', resource_type=ResourceType.BOOK, status=ApprovalStatus.PENDING)

    related = get_other_resources(resource_id=resource.id, db=db)

    assert {item.id for item in related} == {same_type.id, same_author.id}


def test_other_resources_respects_limit(db, make_resource, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'RELATED_RESOURCES_LIMIT', 2)
    resource = make_resource(title='Base')
    for index in range(4):
        make_resource(title=f'Sibling {index}')

    assert len(get_other_resources(resource_id=resource.id, db=db)) == 2


def test_other_resources_returns_404_for_missing_resource(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_other_resources(resource_id=UNKNOWN_ID, db=db)

    assert exception_info.value.status_code == 404
