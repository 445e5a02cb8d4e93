from collections.abc import Generator
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from jot.core.config import get_settings
from jot.core.exceptions import AuthenticationError, PermissionDeniedError, ResourceNotFoundError, ValidationError
from jot.core.security import decode_token
from jot.db.session import SessionLocal
from jot.models.user import User
from jot.services.email import EmailSender, SmtpConfig
from jot.services.storage import UploadthingClient

bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_email_sender() -> EmailSender:
    return EmailSender(SmtpConfig.from_settings(get_settings()))


def get_storage_client() -> UploadthingClient:
    return UploadthingClient.from_settings(get_settings())


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise AuthenticationError("Not authenticated")

    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise AuthenticationError("Invalid or expired token") from exc

    user_id = payload.get("sub")
    user = db.get(User, user_id) if user_id else None
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    return user


def parse_resource_id(value: str, *, label: str) -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid {label.lower()} ID") from exc


def get_owned_or_error(db: Session, model, resource_id: str, *, owner: User, label: str):
    """Load ``model`` by id and enforce ownership; 404 when absent, 403 for another owner."""
    item = db.get(model, parse_resource_id(resource_id, label=label))
    if item is None:
        raise ResourceNotFoundError(label)
    if item.user_id != owner.id:
        raise PermissionDeniedError(f"Forbidden: You do not own this {label.lower()}")
    return item
