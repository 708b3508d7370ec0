"""
School Routes

POST /schools - Create school (manage schools)
GET /schools - List schools (public, used by registration)
GET /schools/{school_id} - School details (public)
PUT /schools/{school_id} - Update school
DELETE /schools/{school_id} - Delete school and everything in it (manage schools)
"""

from fastapi import APIRouter, HTTPException, Depends
from loguru import logger
from typing import List

from eduopps.core.auth import get_current_user
from eduopps.core.permissions import has_permission, require_permission
from eduopps.services import school_service
from eduopps.schemas.schemas import SchoolCreate, SchoolUpdate, SchoolResponse, MessageResponse

router = APIRouter(prefix="/schools", tags=["Schools"])


@router.post("", response_model=SchoolResponse, status_code=201)
async def create_school(
    request: SchoolCreate,
    admin: dict = Depends(require_permission("can_manage_schools"))
):
    school = school_service.create_school(request.model_dump())
    logger.info(f"School {school['id']} created by {admin['id']}")
    return school


@router.get("", response_model=List[SchoolResponse])
async def list_schools():
    return school_service.get_all_schools()


@router.get("/{school_id}", response_model=SchoolResponse)
async def get_school(school_id: int):
    school = school_service.get_school_by_id(school_id)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return school


@router.put("/{school_id}", response_model=SchoolResponse)
async def update_school(school_id: int, request: SchoolUpdate, user: dict = Depends(get_current_user)):
    """
    School managers may update any school; an admin with manage-settings
    may update their own school's profile.
    """
    allowed = has_permission(user, "can_manage_schools") or (
        has_permission(user, "can_manage_settings") and user.get("school_id") == school_id
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    if not school_service.get_school_by_id(school_id):
        raise HTTPException(status_code=404, detail="School not found")

    return school_service.update_school(school_id, request.model_dump(exclude_unset=True))


@router.delete("/{school_id}", response_model=MessageResponse)
async def delete_school(school_id: int, admin: dict = Depends(require_permission("can_manage_schools"))):
    if not school_service.delete_school(school_id):
        raise HTTPException(status_code=404, detail="School not found")
    logger.info(f"School {school_id} deleted by {admin['id']}")
    return MessageResponse(message="School deleted successfully")
