"""FastAPI application exposing the user and product endpoints."""
from __future__ import annotations

from datetime import timedelta
from typing import Annotated, Dict, List

from fastapi import APIRouter, Depends, FastAPI, Path, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .config import Settings, load_settings
from .database import MAX_INTEGER, Database
from .errors import (
    LoginFailedError,
    MissingHeaderError,
    ProductNotFoundError,
    UserEmailDuplicationError,
    UserNotFoundError,
)
from .products import ProductService
from .schemas import (
    ProductData,
    ProductResponse,
    SessionRequest,
    SessionResponse,
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
    product_to_response,
    user_to_response,
)
from .security import Authenticator, Principal, RoleGuard
from .sessions import AuthenticationService, SessionManager
from .users import ADMIN_ROLE, DEFAULT_ROLE, UserService

ProductId = Annotated[int, Path(ge=1, le=MAX_INTEGER)]
UserId = Annotated[int, Path(ge=1, le=MAX_INTEGER)]


def _product_router(products: ProductService, authenticator: Authenticator) -> APIRouter:
    router = APIRouter(prefix="/products", tags=["products"])
    require_user = RoleGuard(authenticator, [DEFAULT_ROLE])

    @router.get("", response_model=List[ProductResponse])
    async def list_products() -> List[ProductResponse]:
        return [product_to_response(product) for product in products.get_products()]

    @router.get("/{product_id}", response_model=ProductResponse)
    async def read_product(product_id: ProductId) -> ProductResponse:
        return product_to_response(products.get_product(product_id))

    @router.post(
        "",
        response_model=ProductResponse,
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(require_user)],
    )
    async def create_product(payload: ProductData) -> ProductResponse:
        return product_to_response(products.create_product(payload))

    @router.api_route(
        "/{product_id}",
        methods=["PUT", "PATCH"],
        response_model=ProductResponse,
        dependencies=[Depends(authenticator)],
    )
    async def update_product(product_id: ProductId, payload: ProductData) -> ProductResponse:
        return product_to_response(products.update_product(product_id, payload))

    @router.delete(
        "/{product_id}",
        status_code=status.HTTP_200_OK,
        response_class=Response,
        dependencies=[Depends(authenticator)],
    )
    async def delete_product(product_id: ProductId) -> Response:
        products.delete_product(product_id)
        return Response(status_code=status.HTTP_200_OK)

    return router


def _user_router(users: UserService, authenticator: Authenticator) -> APIRouter:
    router = APIRouter(prefix="/users", tags=["users"])
    require_user = RoleGuard(authenticator, [DEFAULT_ROLE])
    require_admin = RoleGuard(authenticator, [ADMIN_ROLE])

    @router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def create_user(payload: UserCreateRequest) -> UserResponse:
        user = users.create_user(payload)
        return user_to_response(user, users.roles_for(user.id))

    @router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(authenticator)])
    async def read_user(user_id: UserId) -> UserResponse:
        user = users.get_user(user_id)
        return user_to_response(user, users.roles_for(user.id))

    @router.api_route("/{user_id}", methods=["PATCH", "POST"], response_model=UserResponse)
    async def update_user(
        user_id: UserId,
        payload: UserUpdateRequest,
        principal: Principal = Depends(require_user),
    ) -> UserResponse:
        user = users.update_user(user_id, payload, principal.user_id)
        return user_to_response(user, users.roles_for(user.id))

    @router.delete("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
    async def delete_user(user_id: UserId) -> UserResponse:
        roles = users.roles_for(user_id)
        user = users.delete_user(user_id)
        return user_to_response(user, roles)

    return router


def _session_router(authentication: AuthenticationService, authenticator: Authenticator) -> APIRouter:
    router = APIRouter(prefix="/session", tags=["session"])

    @router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
    async def login(payload: SessionRequest) -> SessionResponse:
        return SessionResponse(access_token=authentication.login(payload.email, payload.password))

    @router.delete("", status_code=status.HTTP_200_OK, response_class=Response)
    async def logout(principal: Principal = Depends(authenticator)) -> Response:
        authentication.logout(principal.token)
        return Response(status_code=status.HTTP_200_OK)

    return router


def create_app(
    *,
    database: Database | None = None,
    settings: Settings | None = None,
    sessions: SessionManager | None = None,
) -> FastAPI:
    if settings is None:
        settings = load_settings()

    if database is None:
        database = Database(settings.database_path)
    database.initialize()

    if sessions is None:
        sessions = SessionManager(ttl=timedelta(minutes=settings.session_ttl_minutes))

    users = UserService(database)
    products = ProductService(database)
    authentication = AuthenticationService(database, sessions)
    authenticator = Authenticator(database, sessions)

    app = FastAPI(
        title="Storefront",
        description="Users and products behind a small REST API",
        version="1.0.0",
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.trusted_proxy_hosts())
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.state.database = database
    app.state.sessions = sessions
    app.state.settings = settings

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    app.include_router(_product_router(products, authenticator))
    app.include_router(_user_router(users, authenticator))
    app.include_router(_session_router(authentication, authenticator))

    @app.exception_handler(MissingHeaderError)
    async def handle_missing_header(_: object, __: MissingHeaderError) -> Response:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    @app.exception_handler(UserNotFoundError)
    @app.exception_handler(ProductNotFoundError)
    async def handle_not_found(_: object, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(UserEmailDuplicationError)
    async def handle_email_duplication(_: object, exc: UserEmailDuplicationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(LoginFailedError)
    async def handle_login_failed(_: object, exc: LoginFailedError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    return app


__all__ = ["create_app"]
