"""Service helpers for user API operations."""

from __future__ import annotations

import logging
from typing import NoReturn

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from restwell.core.exceptions import ConflictException
from restwell.core.exceptions import NotFoundException
from restwell.core.exceptions import UnprocessableEntityException
from restwell.db.models.user import User
from restwell.db.repository.users import create_user
from restwell.db.repository.users import delete_user
from restwell.db.repository.users import get_user
from restwell.db.repository.users import get_user_by_email
from restwell.db.repository.users import list_users
from restwell.db.repository.users import update_user
from restwell.schemas.user import UserCreate
from restwell.schemas.user import UserUpdate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_ISSUE = "already used by another user"


def _require_names(**names: str | None) -> dict[str, str | None]:
    """Strip name fields and reject those left blank."""
    cleaned: dict[str, str | None] = {}
    errors: dict[str, str] = {}
    for field, value in names.items():
        if value is None:
            cleaned[field] = None
            continue
        value = value.strip()
        if not value:
            errors[field] = "must not be blank"
        cleaned[field] = value
    if errors:
        raise UnprocessableEntityException("Validation failed", errors)
    return cleaned


def _raise_duplicate_email(email: str) -> NoReturn:
    exc = ConflictException("A user with this email already exists")
    exc.set_errors({"email": DUPLICATE_EMAIL_ISSUE})
    logger.info("Rejected duplicate email %s", email)
    raise exc


def create_user_service(session: Session, payload: UserCreate) -> User:
    """Create and persist a new user."""
    names = _require_names(first_name=payload.first_name, last_name=payload.last_name)
    email = payload.email.lower()
    if get_user_by_email(session, email) is not None:
        _raise_duplicate_email(email)
    try:
        user = create_user(
            session,
            first_name=names["first_name"],
            last_name=names["last_name"],
            email=email,
        )
        session.commit()
        return user
    except IntegrityError:
        session.rollback()
        _raise_duplicate_email(email)


def list_users_service(
    session: Session,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    is_active: bool | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[User]:
    """List users filtered by field equality."""
    return list_users(
        session,
        first_name=first_name,
        last_name=last_name,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )


def get_user_service(session: Session, user_id: int) -> User:
    """Fetch a user or raise not found."""
    user = get_user(session, user_id)
    if user is None:
        raise NotFoundException(f"User {user_id} not found")
    return user


def update_user_service(session: Session, user_id: int, payload: UserUpdate) -> User:
    """Update mutable fields of an existing user."""
    user = get_user_service(session, user_id)
    names = _require_names(first_name=payload.first_name, last_name=payload.last_name)
    email = payload.email.lower() if payload.email is not None else None
    if email is not None and email != user.email:
        other = get_user_by_email(session, email)
        if other is not None:
            _raise_duplicate_email(email)
    try:
        user = update_user(
            session,
            user,
            first_name=names["first_name"],
            last_name=names["last_name"],
            email=email,
            is_active=payload.is_active,
        )
        session.commit()
        return user
    except IntegrityError:
        session.rollback()
        _raise_duplicate_email(email or user.email)


def delete_user_service(session: Session, user_id: int) -> None:
    """Delete an existing user."""
    user = get_user_service(session, user_id)
    delete_user(session, user)
    session.commit()
