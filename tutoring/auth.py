from typing import Any

import jwt
from fastapi import Depends, Path, Request
from fastapi.openapi.models import HTTPBearer as HTTPBearerModel
from fastapi.security.base import SecurityBase

from .exceptions.auth import InvalidAccessTokenError, PermissionDeniedError
from .logger import get_logger
from .schemas.user import User, UserAccessToken
from .settings import settings


logger = get_logger(__name__)


def decode_jwt(token: str, require: list[str] | None = None) -> dict[str, Any] | None:
    try:
        return jwt.decode(
            token, settings.jwt_secret, algorithms=["HS256"], options={"require": ["exp", *(require or [])]}
        )
    except jwt.InvalidTokenError:
        return None


def get_token(request: Request) -> str | None:
    authorization: str = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


class HTTPAuth(SecurityBase):
    def __init__(self) -> None:
        self.model = HTTPBearerModel()
        self.scheme_name = self.__class__.__name__

    async def __call__(self, request: Request) -> Any:
        raise NotImplementedError


class JWTAuth(HTTPAuth):
    async def __call__(self, request: Request) -> User | None:
        if not (token := get_token(request)):
            return None

        if (data := decode_jwt(token, ["uid"])) is None:
            logger.debug("rejected invalid access token")
            return None

        return UserAccessToken.model_validate(data).to_user()


class PublicAuth(JWTAuth):
    pass


class UserAuth(JWTAuth):
    async def __call__(self, request: Request) -> User:
        if not (user := await super().__call__(request)):
            raise InvalidAccessTokenError
        return user


class AdminAuth(UserAuth):
    async def __call__(self, request: Request) -> User:
        user = await super().__call__(request)
        if not user.admin:
            raise PermissionDeniedError
        return user


public_auth = Depends(PublicAuth())
user_auth = Depends(UserAuth())
admin_auth = Depends(AdminAuth())
require_admin = admin_auth


def get_user(*, require_self_or_admin: bool = False) -> Any:
    """
    Resolve the `user_id` path parameter.

    `me` and `self` refer to the authenticated user. With `require_self_or_admin` only the user themselves or an
    admin may access the resource.
    """

    async def default_get_user(user_id: str = Path(), user: User | None = public_auth) -> str:
        if user_id.lower() in ["me", "self"]:
            if not user:
                raise InvalidAccessTokenError
            return user.id
        return user_id

    async def self_or_admin(user_id: str = Path(), user: User = user_auth) -> str:
        if user_id.lower() in ["me", "self"]:
            user_id = user.id
        if user.id != user_id and not user.admin:
            raise PermissionDeniedError
        return user_id

    return Depends(self_or_admin if require_self_or_admin else default_get_user)
