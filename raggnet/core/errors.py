"""Error taxonomy shared by validators, guards and handlers.

Every error is an ``HTTPException`` so FastAPI stops the request pipeline at
the point it is raised; the application's exception handler renders these as
``{"detail": ...}`` while framework errors are answered with a bare status.
"""

from fastapi import HTTPException, status


class ApiError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'

    def __init__(self, detail=None, headers: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=detail if detail is not None else self.default_detail,
            headers=headers,
        )


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'


class AuthenticationError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Not authenticated.'

    def __init__(self, detail=None) -> None:
        super().__init__(detail, headers={'WWW-Authenticate': 'Bearer'})


class AuthorizationError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Not allowed.'


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'


class InternalError(ApiError):
    pass
