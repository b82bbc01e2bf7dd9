import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import APIRouter, Depends, Request, Response
from sqlmodel import Session, select

from thrifthub.configuration.settings import Configuration
from thrifthub.core.exceptions.app_exception import AuthenticationException, ConflictException, ForbiddenException
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.user_role import UserRole
from thrifthub.models.user.user import User
from thrifthub.schemas.auth.auth import AuthCredentials, ProfileUpdate, RefreshRequest, RegisterRequest, Token, UserRead

configuration = Configuration()

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

db_session = get_session


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class AuthRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/auth/register", self.register, methods=["POST"], response_model=ApiResponse[Token], status_code=201)
        self.add_api_route("/auth/login", self.login, methods=["POST"], response_model=ApiResponse[Token])
        self.add_api_route("/auth/refresh", self.refresh, methods=["POST"], response_model=ApiResponse[Token])
        self.add_api_route("/auth/logout", self.logout, methods=["POST"], response_model=ApiResponse[None])
        self.add_api_route("/auth/me", self.me, methods=["GET"], response_model=ApiResponse[UserRead])
        self.add_api_route("/auth/profile", self.me, methods=["GET"], response_model=ApiResponse[UserRead])
        self.add_api_route("/auth/profile", self.update_profile, methods=["PATCH"], response_model=ApiResponse[UserRead])

    # Tokens

    def _generate_jwt(self, user: User, secret: str, expires_in: timedelta, token_type: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user_id": user.id,
            "email": user.email,
            "role": user.role.value,
            "type": token_type,
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    def create_access_token(self, user: User) -> str:
        return self._generate_jwt(user, configuration.jwt_secret, timedelta(minutes=configuration.jwt_access_minutes), "access")

    def create_refresh_token(self, user: User) -> str:
        return self._generate_jwt(user, configuration.jwt_refresh_secret, timedelta(days=configuration.jwt_refresh_days), "refresh")

    def decode_jwt(self, token: str, secret: Optional[str] = None, token_type: str = "access") -> dict:
        try:
            payload = jwt.decode(token, secret or configuration.jwt_secret, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            raise AuthenticationException("Token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationException("Invalid token")

        if payload.get("type") != token_type or "user_id" not in payload:
            raise AuthenticationException("Invalid token")
        return payload

    def _issue_tokens(self, user: User, response: Response) -> Token:
        access_token = self.create_access_token(user)
        refresh_token = self.create_refresh_token(user)

        response.set_cookie(
            ACCESS_COOKIE, access_token,
            max_age=configuration.jwt_access_minutes * 60,
            httponly=True, secure=configuration.cookie_secure, samesite="lax",
        )
        response.set_cookie(
            REFRESH_COOKIE, refresh_token,
            max_age=configuration.jwt_refresh_days * 24 * 3600,
            httponly=True, secure=configuration.cookie_secure, samesite="lax",
        )
        return Token(user=UserRead.model_validate(user), access_token=access_token, refresh_token=refresh_token)

    # Current user

    def extract_token(self, request: Request) -> Optional[str]:
        authorization: Optional[str] = request.headers.get("Authorization")
        if authorization:
            parts = authorization.split()
            if len(parts) != 2 or parts[0].lower() != "bearer":
                raise AuthenticationException("Invalid authorization header")
            return parts[1]
        return request.cookies.get(ACCESS_COOKIE)

    def get_current_user(self, request: Request, session: Session = Depends(db_session)) -> User:
        token = self.extract_token(request)
        if not token:
            raise AuthenticationException("Authentication required")

        payload = self.decode_jwt(token)
        user = session.get(User, payload["user_id"])

        if not user:
            raise AuthenticationException("User not found")
        if not user.is_active:
            raise ForbiddenException("Account is inactive")
        return user

    # Endpoints

    def register(self, data: RegisterRequest, response: Response, session: Session = Depends(db_session)):
        existing = session.exec(select(User).where(User.email == data.email)).first()
        if existing:
            raise ConflictException("An account with this email already exists")

        user = User(
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            phone=data.phone,
            role=UserRole.STUDENT,
            last_login=datetime.now(timezone.utc),
        )
        session.add(user)
        session.commit()
        session.refresh(user)

        logging.info(f"AUTH >>> New account {user.id} registered")
        return ok(self._issue_tokens(user, response), "Registration successful")

    def login(self, credentials: AuthCredentials, response: Response, session: Session = Depends(db_session)):
        user = session.exec(select(User).where(User.email == credentials.email.lower())).first()

        if not user or not check_password(credentials.password, user.password_hash):
            raise AuthenticationException("Invalid email or password")
        if not user.is_active:
            raise ForbiddenException("Account is inactive")

        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)

        return ok(self._issue_tokens(user, response), "Login successful")

    def refresh(self, request: Request, response: Response, data: Optional[RefreshRequest] = None, session: Session = Depends(db_session)):
        token = (data.refresh_token if data else None) or request.cookies.get(REFRESH_COOKIE)
        if not token:
            raise AuthenticationException("Refresh token required")

        payload = self.decode_jwt(token, secret=configuration.jwt_refresh_secret, token_type="refresh")
        user = session.get(User, payload["user_id"])
        if not user or not user.is_active:
            raise AuthenticationException("Invalid refresh token")

        return ok(self._issue_tokens(user, response), "Token refreshed")

    def logout(self, response: Response):
        response.delete_cookie(ACCESS_COOKIE)
        response.delete_cookie(REFRESH_COOKIE)
        return ok(None, "Logged out")

    def me(self, request: Request, session: Session = Depends(db_session)):
        user = self.get_current_user(request, session)
        return ok(UserRead.model_validate(user))

    def update_profile(self, data: ProfileUpdate, request: Request, session: Session = Depends(db_session)):
        user = self.get_current_user(request, session)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value.strip() if isinstance(value, str) else value)
        user.updated_at = datetime.now(timezone.utc)

        session.add(user)
        session.commit()
        session.refresh(user)
        return ok(UserRead.model_validate(user), "Profile updated")
