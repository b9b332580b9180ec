"""API routes for the users service."""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from ..runtime.metrics import MetricsCollector
from ..store import User, UserNotFoundError, UserStore

logger = structlog.get_logger("users_service.api")

router = APIRouter()


class CreateUserRequest(BaseModel):
    """Request model for user creation."""
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Contact email")


class UpdateUserRequest(BaseModel):
    """Request model for partial user updates.

    Only the non-null fields present in the body are applied.
    """
    name: Optional[str] = Field(None, description="New display name")
    email: Optional[str] = Field(None, description="New contact email")


def get_user_store(request: Request) -> UserStore:
    """Get the user store from application state."""
    return request.app.state.user_store


def get_metrics(request: Request) -> MetricsCollector:
    """Get metrics collector from application state."""
    return request.app.state.metrics_collector


def _not_found(exc: UserNotFoundError, operation: str, metrics_collector: MetricsCollector) -> HTTPException:
    metrics_collector.record_user_operation(operation, outcome="not_found")
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/users", response_model=List[User])
async def list_users(
    store: UserStore = Depends(get_user_store),
    metrics_collector: MetricsCollector = Depends(get_metrics)
):
    """List all users in insertion order."""
    users = store.list_users()
    metrics_collector.record_user_operation("list")
    return users


@router.get("/users/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    store: UserStore = Depends(get_user_store),
    metrics_collector: MetricsCollector = Depends(get_metrics)
):
    """Fetch a single user."""
    try:
        user = store.get_user(user_id)
    except UserNotFoundError as e:
        raise _not_found(e, "get", metrics_collector)

    metrics_collector.record_user_operation("get")
    return user


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    store: UserStore = Depends(get_user_store),
    metrics_collector: MetricsCollector = Depends(get_metrics)
):
    """Create a user; the store assigns its ID."""
    user = store.create_user(request.model_dump())

    metrics_collector.record_user_operation("create")
    metrics_collector.set_user_records(store.count())
    return user


@router.put("/users/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    request: UpdateUserRequest,
    store: UserStore = Depends(get_user_store),
    metrics_collector: MetricsCollector = Depends(get_metrics)
):
    """Apply a partial update to a user."""
    try:
        user = store.update_user(user_id, request.model_dump(exclude_unset=True, exclude_none=True))
    except UserNotFoundError as e:
        raise _not_found(e, "update", metrics_collector)

    metrics_collector.record_user_operation("update")
    return user


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    store: UserStore = Depends(get_user_store),
    metrics_collector: MetricsCollector = Depends(get_metrics)
):
    """Delete a user."""
    try:
        store.delete_user(user_id)
    except UserNotFoundError as e:
        raise _not_found(e, "delete", metrics_collector)

    metrics_collector.record_user_operation("delete")
    metrics_collector.set_user_records(store.count())
    return Response(status_code=status.HTTP_200_OK)
