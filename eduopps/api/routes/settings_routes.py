"""
System Settings & Filter Option Routes

POST /settings - Create or update a setting (manage settings)
GET /settings - All settings as a key/value object
POST /filter-options - Add a filter option (manage settings)
GET /filter-options?category= - Active filter options
PUT /filter-options/{option_id} - Update a filter option (manage settings)
DELETE /filter-options/{option_id} - Deactivate a filter option (manage settings)
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Dict, List, Optional

from eduopps.core.auth import get_current_user
from eduopps.core.permissions import require_permission
from eduopps.services import settings_service
from eduopps.schemas.schemas import (
    SettingUpsert, SettingResponse, FilterOptionCreate, FilterOptionUpdate,
    FilterOptionResponse, MessageResponse
)

router = APIRouter(tags=["Settings"])

manage_settings = require_permission("can_manage_settings")


@router.post("/settings", response_model=SettingResponse)
async def upsert_setting(request: SettingUpsert, admin: dict = Depends(manage_settings)):
    return settings_service.upsert_setting(request.key, request.value, request.description, admin["id"])


@router.get("/settings", response_model=Dict[str, str])
async def get_settings_map(user: dict = Depends(get_current_user)):
    return settings_service.get_settings_map()


@router.post("/filter-options", response_model=FilterOptionResponse, status_code=201)
async def create_filter_option(request: FilterOptionCreate, admin: dict = Depends(manage_settings)):
    return settings_service.create_filter_option(request.model_dump(), admin["id"])


@router.get("/filter-options", response_model=List[FilterOptionResponse])
async def list_filter_options(category: Optional[str] = Query(None)):
    """Public: the registration and browse pages load these before login."""
    return settings_service.get_active_filter_options(category)


@router.put("/filter-options/{option_id}", response_model=FilterOptionResponse)
async def update_filter_option(option_id: int, request: FilterOptionUpdate, admin: dict = Depends(manage_settings)):
    if not settings_service.get_filter_option(option_id):
        raise HTTPException(status_code=404, detail="Filter option not found")
    return settings_service.update_filter_option(option_id, request.model_dump(exclude_unset=True))


@router.delete("/filter-options/{option_id}", response_model=MessageResponse)
async def delete_filter_option(option_id: int, admin: dict = Depends(manage_settings)):
    if not settings_service.deactivate_filter_option(option_id):
        raise HTTPException(status_code=404, detail="Filter option not found")
    return MessageResponse(message="Filter option deleted successfully")
