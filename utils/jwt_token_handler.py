from datetime import datetime, timedelta
from typing import Optional
import http

import jwt
from fastapi import HTTPException
from pydantic import BaseModel

from config import JWT_ALGORITHM, JWT_SECRET
from context_manager.context import context_user_data


# schema
class UserDataModel(BaseModel):
    id: int
    client_id: int
    email: Optional[str] = None
    status: str = "active"

    def __str__(self):
        return "client:{} user:{}".format(self.client_id, self.id)


class JWTHandler:
    """
    Tokens are issued by the identity service; this side only verifies them and
    places the principal in the request context.
    """

    @staticmethod
    def create_access_token(to_encode: dict, expires_delta: timedelta = timedelta(hours=6)):
        user_data = to_encode.copy()
        user_data.setdefault("status", "active")
        user_data.update({"exp": (datetime.now() + expires_delta).timestamp()})
        return jwt.encode(user_data, JWT_SECRET, algorithm=JWT_ALGORITHM)

    @staticmethod
    def decode_access_token(token: str) -> UserDataModel:
        try:
            payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
            principal = UserDataModel(**payload)

        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=http.HTTPStatus.UNAUTHORIZED,
                detail={"message": "Token has expired", "status": False},
            )

        except (jwt.InvalidTokenError, ValueError):
            raise HTTPException(
                status_code=http.HTTPStatus.UNAUTHORIZED,
                detail={"message": "Invalid token", "status": False},
            )

        if principal.status != "active":
            raise HTTPException(
                status_code=http.HTTPStatus.FORBIDDEN,
                detail={
                    "message": "Account is not active. Please contact support.",
                    "status": False,
                },
            )

        context_user_data.set(principal)
        return principal
