"""
api/routes/v1/users.py -- User directory REST endpoints.

Routes:
  POST   /api/v1/users             -- create a user (password hashed like /auth/register)
  GET    /api/v1/users             -- paginated list, ?page=&size=&email=&name=
  GET    /api/v1/users/{user_id}   -- one user
  PUT    /api/v1/users/{user_id}   -- update profile fields
  DELETE /api/v1/users/{user_id}   -- delete

All routes require a valid access token. Responses never include the
password hash or the stored refresh token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.models import Meta, RegisterRequest, UserPage, UserResponse, UserUpdate
from auth.dependencies import get_current_principal, get_session_manager
from auth.models import Principal, UserSnapshot
from auth.session import SessionManager
from core.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_meta

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": "User not found."},
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    body: RegisterRequest,
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> UserResponse:
    """Create a user account on someone else's behalf. 409 if the email is taken."""
    snapshot = manager.register(body.email, body.password, body.to_profile())
    return UserResponse.from_snapshot(snapshot)


@router.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(default=1, ge=1),
    size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    email: str | None = Query(default=None, max_length=255),
    name: str | None = Query(default=None, max_length=255),
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> UserPage:
    users, total = manager.store.list_users(page, size, email=email, name=name)
    return UserPage(
        meta=Meta.from_page_meta(page_meta(page, size, total)),
        result=[UserResponse.from_snapshot(UserSnapshot.from_user(u)) for u in users],
    )


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> UserResponse:
    user = manager.store.get_by_id(user_id)
    if user is None:
        raise _not_found()
    return UserResponse.from_snapshot(UserSnapshot.from_user(user))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> UserResponse:
    """Update profile fields. Email, role and password are not editable here.

    Omitted and null fields are left unchanged. Only the submitted columns are
    written, so a logout or token rotation that lands meanwhile is kept.
    """
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No fields to update."},
        )
    if not manager.store.update_profile(user_id, **changes):
        raise _not_found()
    user = manager.store.get_by_id(user_id)
    if user is None:
        raise _not_found()
    return UserResponse.from_snapshot(UserSnapshot.from_user(user))


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    principal: Principal = Depends(get_current_principal),
    manager: SessionManager = Depends(get_session_manager),
) -> Response:
    if not manager.store.delete_user(user_id):
        raise _not_found()
    return Response(status_code=204)
