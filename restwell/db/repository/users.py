"""Repository primitives for user entities."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from restwell.db.models.user import User


def create_user(
    session: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    is_active: bool = True,
) -> User:
    """Create and return a user row."""
    user = User(first_name=first_name, last_name=last_name, email=email, is_active=is_active)
    session.add(user)
    session.flush()
    session.refresh(user)
    return user


def get_user(session: Session, user_id: int) -> User | None:
    """Fetch a user by id."""
    return session.get(User, user_id)


def get_user_by_email(session: Session, email: str) -> User | None:
    """Fetch a user by email address."""
    return session.scalars(select(User).where(User.email == email)).first()


def list_users(
    session: Session,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    is_active: bool | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[User]:
    """List users, keeping only rows equal to every given field value."""
    stmt = select(User)
    if first_name is not None:
        stmt = stmt.where(User.first_name == first_name)
    if last_name is not None:
        stmt = stmt.where(User.last_name == last_name)
    if is_active is not None:
        stmt = stmt.where(User.is_active == is_active)
    stmt = stmt.order_by(User.id).limit(limit).offset(offset)
    return list(session.scalars(stmt))


def update_user(
    session: Session,
    user: User,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    is_active: bool | None = None,
) -> User:
    """Update mutable user fields."""
    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    if email is not None:
        user.email = email
    if is_active is not None:
        user.is_active = is_active
    session.flush()
    session.refresh(user)
    return user


def delete_user(session: Session, user: User) -> None:
    """Delete a user row."""
    session.delete(user)
    session.flush()
