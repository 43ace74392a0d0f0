import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from raggnet.core import config
from raggnet.core.errors import ApiError
from raggnet.database import build_engine, build_session_factory, init_database
from raggnet.routes import admin_routes, auth_routes, resource_routes, user_routes

logger = logging.getLogger(__name__)


def create_app(database_url: str | None = None) -> FastAPI:
    app = FastAPI(title='RaggNet API')

    app.state.engine = build_engine(database_url or config.DATABASE_URL)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.on_event('startup')
    def initialize_database() -> None:
        if not config.is_production():
            logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
        config.validate_runtime_config()
        try:
            init_database(app.state.engine, app.state.session_factory)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

    @app.on_event('shutdown')
    def close_database() -> None:
        app.state.engine.dispose()

    if not config.is_production():
        @app.middleware('http')
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info('%s %s %s %.1fms', request.method, request.url.path, response.status_code, elapsed_ms)
            return response

    register_error_handlers(app)

    @app.get('/')
    def root():
        return {'status': 'RaggNet API Running'}

    app.include_router(user_routes.router, prefix='/users')
    app.include_router(resource_routes.router, prefix='/resources')
    app.include_router(admin_routes.router, prefix='/admins')
    app.include_router(auth_routes.router, prefix='/auth')

    return app


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={'detail': jsonable_encoder(exc.errors(), custom_encoder={Exception: str})},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            if not config.is_production():
                logger.error('%s %s failed: %r', request.method, request.url.path, exc.__cause__ or exc.detail)
            return Response(status_code=exc.status_code)
        if isinstance(exc, ApiError):
            return JSONResponse(status_code=exc.status_code, content={'detail': exc.detail}, headers=exc.headers)
        return Response(status_code=exc.status_code, headers=getattr(exc, 'headers', None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        if not config.is_production():
            logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
        status_code = getattr(exc, 'status_code', None)
        if not isinstance(status_code, int):
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return Response(status_code=status_code)


app = create_app()
