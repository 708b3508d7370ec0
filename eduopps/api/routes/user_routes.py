"""
User Management Routes

POST /users - Create user (manage users)
PUT /users/{user_id} - Update another user (manage users)
GET /users/school/{school_id} - Users of a school, optional ?role=
GET /users/role/{role} - Users with a role
GET /user-roles - All roles (manage users)
GET /public/user-roles - Roles open to self-registration
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from loguru import logger
from typing import List, Optional

from eduopps.core.auth import hash_password, get_current_user
from eduopps.core.permissions import has_permission, is_superadmin, require_permission
from eduopps.services import school_service, user_service
from eduopps.schemas.schemas import RoleName, UserCreate, UserUpdate, UserResponse, UserRoleResponse

router = APIRouter(tags=["Users"])


def _check_school_scope(admin: dict, school_id: Optional[int]):
    """Admins without manage-schools only manage users of their own school."""
    if has_permission(admin, "can_manage_schools"):
        return
    if school_id != admin.get("school_id"):
        raise HTTPException(status_code=403, detail="You can only manage users in your own school")


def _check_role(admin: dict, role_id: int, school_id: Optional[int]) -> dict:
    role = user_service.get_role_by_id(role_id)
    if not role:
        raise HTTPException(status_code=400, detail="Role not found")
    if role["name"] == "superadmin" and not is_superadmin(admin):
        raise HTTPException(status_code=403, detail="Only a superadmin can assign the superadmin role")
    if role["requires_school"] and school_id is None:
        raise HTTPException(status_code=400, detail=f"Role '{role['name']}' requires a school")
    return role


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    request: UserCreate,
    admin: dict = Depends(require_permission("can_manage_users"))
):
    """Create a user with any role."""
    data = request.model_dump(exclude={"password", "confirm_password"})
    if not has_permission(admin, "can_manage_schools") and data["school_id"] is None:
        data["school_id"] = admin.get("school_id")
    _check_school_scope(admin, data["school_id"])
    _check_role(admin, data["role_id"], data["school_id"])

    if data["school_id"] is not None and not school_service.get_school_by_id(data["school_id"]):
        raise HTTPException(status_code=400, detail="School not found")

    if user_service.get_user_by_email(data["email"]):
        raise HTTPException(status_code=400, detail="Email already in use")

    if user_service.get_user_by_username(data["username"]):
        raise HTTPException(status_code=400, detail="Username already taken")

    user = user_service.create_user(data, hash_password(request.password))
    logger.info(f"User {user['id']} ({user['role']}) created by {admin['id']}")
    return user


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    request: UserUpdate,
    admin: dict = Depends(require_permission("can_manage_users"))
):
    """Update another user. Users cannot edit their own record here."""
    if admin["id"] == user_id:
        raise HTTPException(status_code=403, detail="You cannot edit your own user record")

    existing = user_service.get_user_by_id(user_id)
    if not existing:
        raise HTTPException(status_code=404, detail="User not found")

    _check_school_scope(admin, existing["school_id"])

    updates = request.model_dump(exclude_unset=True)
    if "school_id" in updates:
        _check_school_scope(admin, updates["school_id"])
    if "role_id" in updates or "school_id" in updates:
        _check_role(
            admin,
            updates.get("role_id") or existing["role_id"],
            updates.get("school_id", existing["school_id"]),
        )

    if updates.get("email") and updates["email"].lower() != existing["email"]:
        other = user_service.get_user_by_email(updates["email"])
        if other and other["id"] != user_id:
            raise HTTPException(status_code=400, detail="Email already in use")

    if updates.get("username") and updates["username"] != existing["username"]:
        other = user_service.get_user_by_username(updates["username"])
        if other and other["id"] != user_id:
            raise HTTPException(status_code=400, detail="Username already taken")

    return user_service.update_user(user_id, updates)


@router.get("/users/school/{school_id}", response_model=List[UserResponse])
async def get_school_users(
    school_id: int,
    role: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Users of one school, optionally filtered by role name."""
    return user_service.get_users_by_school(school_id, role)


@router.get("/users/role/{role}", response_model=List[UserResponse])
async def get_role_users(role: RoleName, user: dict = Depends(get_current_user)):
    return user_service.get_users_by_role(role.value)


@router.get("/user-roles", response_model=List[UserRoleResponse])
async def get_user_roles(admin: dict = Depends(require_permission("can_manage_users"))):
    return user_service.get_roles()


@router.get("/public/user-roles", response_model=List[UserRoleResponse])
async def get_public_user_roles():
    """Only the teacher role is open for self-registration."""
    return [role for role in user_service.get_roles() if role["name"].lower() == "teacher"]
