"""
FastAPI dependencies: database session, settings and the verified caller.
"""
from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from config.settings import Settings
from services import AuthenticationError, Caller, resolve_caller


def get_db(request: Request) -> Generator[Session, None, None]:
    """Session from the Database attached to the running app."""
    yield from request.app.state.database.get_db()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Expected Bearer token")
    return token


def get_current_caller(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Caller:
    """Resolve the caller or reject the request with 401."""
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Missing bearer token")
    return resolve_caller(db, token, settings)


def get_optional_caller(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Optional[Caller]:
    """Like get_current_caller, but anonymous requests get None."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    return resolve_caller(db, token, settings)
