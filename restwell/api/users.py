"""User API routes.

``/users`` is the list resource (read a collection, create a member) and
``/users/{user_id}`` the item resource (read, update, delete one member).
Routes only delegate to the service layer; failures raised there are
rendered by the exception listener.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import Response
from sqlalchemy.orm import Session

from restwell.db.base import get_db_session
from restwell.schemas.user import User
from restwell.schemas.user import UserCreate
from restwell.schemas.user import UserListResponse
from restwell.schemas.user import UserUpdate
from restwell.services.users import create_user_service
from restwell.services.users import delete_user_service
from restwell.services.users import get_user_service
from restwell.services.users import list_users_service
from restwell.services.users import update_user_service

router = APIRouter(prefix="/api/v1", tags=["users"])


@router.get("/users", response_model=UserListResponse)
def list_users_endpoint(
    first_name: str | None = None,
    last_name: str | None = None,
    is_active: bool | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(get_db_session),
) -> UserListResponse:
    """List users, optionally filtered by field equality, ordered by id."""
    users = list_users_service(
        session,
        first_name=first_name,
        last_name=last_name,
        is_active=is_active,
        limit=limit,
        offset=offset,
    )
    return UserListResponse(items=users)


@router.post("/users", response_model=User, status_code=201)
def create_user_endpoint(
    payload: UserCreate,
    session: Session = Depends(get_db_session),
) -> User:
    """Create a user."""
    return create_user_service(session, payload)


@router.get("/users/{user_id}", response_model=User)
def get_user_endpoint(
    user_id: int,
    session: Session = Depends(get_db_session),
) -> User:
    """Get a single user by id."""
    return get_user_service(session, user_id)


@router.patch("/users/{user_id}", response_model=User)
def update_user_endpoint(
    user_id: int,
    payload: UserUpdate,
    session: Session = Depends(get_db_session),
) -> User:
    """Update a user."""
    return update_user_service(session, user_id, payload)


@router.delete("/users/{user_id}", status_code=204)
def delete_user_endpoint(
    user_id: int,
    session: Session = Depends(get_db_session),
) -> Response:
    """Delete a user."""
    delete_user_service(session, user_id)
    return Response(status_code=204)
