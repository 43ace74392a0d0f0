import os

import pytest

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from raggnet.auth.passwords import hash_password  # noqa: E402
from raggnet.auth.roles import Role  # noqa: E402
from raggnet.database import Base, build_engine, build_session_factory  # noqa: E402
from raggnet.models.resource import ApprovalStatus, Resource, ResourceType  # noqa: E402
from raggnet.models.session_token import SessionToken  # noqa: E402, F401
from raggnet.models.user import User  # noqa: E402

TEST_PASSWORD = 'correct-horse-battery'
_HASHED_TEST_PASSWORD = hash_password(TEST_PASSWORD)


@pytest.fixture
def db():
    engine = build_engine('sqlite://')
    Base.metadata.create_all(bind=engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db):
    def _make_user(email: str = 'reader@example.com', role: Role = Role.USER, **fields) -> User:
        user = User(email=email, hashed_password=_HASHED_TEST_PASSWORD, role=role.value, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_resource(db):
    def _make_resource(
        title: str = 'Structure and Interpretation of Computer Programs',
        resource_type: ResourceType = ResourceType.BOOK,
        status: ApprovalStatus = ApprovalStatus.APPROVED,
        submitted_by: str | None = None,
    ) -> Resource:
        resource = Resource(
            title=title,
            type=resource_type.value,
            status=status.value,
            submitted_by=submitted_by,
        )
        db.add(resource)
        db.commit()
        db.refresh(resource)
        return resource

    return _make_resource


@pytest.fixture
def user_password() -> str:
    return TEST_PASSWORD
