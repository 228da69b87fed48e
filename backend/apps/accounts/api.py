"""
Accounts API endpoints.

- Current principal (``/auth/me``)
- Company user directory and administration (``/users``)
"""

from uuid import UUID

from django.http import HttpRequest
from ninja import Query, Router

from apps.accounts.schemas import (
    MeResponse,
    UserInvite,
    UserListParams,
    UserPageResponse,
    UserResponse,
    UserUpdate,
)
from apps.accounts.services import user_resource
from apps.core.resources import list_response
from apps.core.schemas import ErrorResponse, MessageResponse, envelope
from apps.core.security import BearerAuth, get_auth_context

auth_router = Router(tags=["auth"])
users_router = Router(tags=["users"])
bearer_auth = BearerAuth()


@auth_router.get(
    "/me",
    response={200: MeResponse, 401: ErrorResponse},
    auth=bearer_auth,
    operation_id="getCurrentUser",
    summary="Get current user info",
)
def get_current_user(request: HttpRequest):
    """
    The authenticated user, their company and role set.

    Requires a valid access token in the Authorization header.
    """
    ctx = get_auth_context(request)
    return envelope({"user": ctx.user, "company": ctx.company, "roles": sorted(ctx.roles)})


@users_router.get("", response=UserPageResponse, auth=bearer_auth, summary="List users")
def list_users(request: HttpRequest, params: Query[UserListParams]):
    return list_response(user_resource, get_auth_context(request), params)


@users_router.get(
    "/{user_id}",
    response={200: UserResponse, 404: ErrorResponse},
    auth=bearer_auth,
    summary="Get user",
)
def get_user(request: HttpRequest, user_id: UUID):
    return envelope(user_resource.get(get_auth_context(request), user_id))


@users_router.post(
    "",
    response={201: UserResponse, 400: ErrorResponse, 403: ErrorResponse},
    auth=bearer_auth,
    operation_id="inviteUser",
    summary="Invite user",
    description="Admins only. Creates an active user in the caller's company.",
)
def invite_user(request: HttpRequest, payload: UserInvite):
    user = user_resource.create(get_auth_context(request), payload.as_payload())
    return 201, envelope(user)


@users_router.put(
    "/{user_id}",
    response={200: UserResponse, 400: ErrorResponse, 403: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    summary="Update user",
)
def update_user(request: HttpRequest, user_id: UUID, payload: UserUpdate):
    user = user_resource.update(get_auth_context(request), user_id, payload.as_payload())
    return envelope(user)


@users_router.delete(
    "/{user_id}",
    response={200: MessageResponse, 403: ErrorResponse, 404: ErrorResponse},
    auth=bearer_auth,
    summary="Delete user",
)
def delete_user(request: HttpRequest, user_id: UUID):
    user_resource.delete(get_auth_context(request), user_id)
    return {"success": True, "message": "User deleted successfully"}
