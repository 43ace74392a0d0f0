from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from raggnet.auth.token_store import TokenStore
from raggnet.models.session_token import SessionToken
from raggnet.routes.auth_routes import LoginRequest, login, logout


def test_login_issues_token_for_valid_credentials(db, make_user, user_password) -> None:
    user = make_user()

    response = login(LoginRequest(email=' READER@example.com ', password=user_password), db=db)

    assert response.token_type == 'bearer'
    assert TokenStore(db).resolve(response.access_token) == user.id


@pytest.mark.parametrize(
    ('email', 'password'),
    [('reader@example.com', 'wrong-password'), ('nobody@example.com', 'correct-horse-battery')],
)
def test_login_rejects_bad_credentials_without_issuing(db, make_user, email, password) -> None:
    make_user()

    with pytest.raises(HTTPException) as exception_info:
        login(LoginRequest(email=email, password=password), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid email or password'
    assert db.query(SessionToken).count() == 0


def test_logout_revokes_token(db, make_user) -> None:
    user = make_user()
    token = TokenStore(db).issue(user.id)

    response = logout(credentials=SimpleNamespace(credentials=token), db=db)

    assert response.status_code == 204
    assert TokenStore(db).resolve(token) is None


@pytest.mark.parametrize('credentials', [None, SimpleNamespace(credentials='unknown-token')])
def test_logout_succeeds_without_a_live_token(db, credentials) -> None:
    response = logout(credentials=credentials, db=db)

    assert response.status_code == 204
