"""
Authentication Routes

POST /auth/login - Login and get JWT token
POST /auth/logout - Logout (tokens are stateless)
GET /auth/current-user - Current user with role, school and permissions
POST /auth/register/teacher - Teacher self-registration
"""

from fastapi import APIRouter, HTTPException, Depends
from loguru import logger

from eduopps.core.auth import hash_password, verify_password, create_access_token, get_current_user
from eduopps.core.permissions import ui_capabilities
from eduopps.services import school_service, user_service
from eduopps.schemas.schemas import (
    LoginRequest, TokenResponse, UserResponse, CurrentUserResponse,
    TeacherRegisterRequest, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = user_service.get_user_by_email(request.email, include_password=True)

    if not user or not verify_password(request.password, user["password_hash"]):
        logger.warning(f"Failed login for {request.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    token = create_access_token(data={"sub": str(user["id"]), "role": user["role"]})
    logger.info(f"User {user['id']} logged in")

    return TokenResponse(access_token=token, user=UserResponse(**user))


@router.post("/logout", response_model=MessageResponse)
async def logout(user: dict = Depends(get_current_user)):
    """Bearer tokens are stateless; the client discards its token."""
    logger.info(f"User {user['id']} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get("/current-user", response_model=CurrentUserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info, permissions and navigation."""
    return CurrentUserResponse(**user, navigation=ui_capabilities(user))


@router.post("/register/teacher", response_model=UserResponse, status_code=201)
async def register_teacher(request: TeacherRegisterRequest):
    """
    Self-registration for teachers.

    After registration, login to get an access token.
    """
    if user_service.get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already in use")

    if user_service.get_user_by_username(request.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    if not school_service.get_school_by_id(request.school_id):
        raise HTTPException(status_code=400, detail="School not found")

    role = user_service.get_role_by_name("teacher")
    if not role:
        raise HTTPException(status_code=400, detail="Teacher role is not configured")

    data = request.model_dump(exclude={"password", "confirm_password"})
    data["role_id"] = role["id"]
    user = user_service.create_user(data, hash_password(request.password))
    logger.info(f"Teacher {user['id']} registered for school {request.school_id}")

    return user
