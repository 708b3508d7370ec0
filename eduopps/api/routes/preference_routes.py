"""
Student Preference Routes

POST /student-preferences - Save preferences (replaces existing)
GET /student-preferences - Saved preferences or empty defaults
PUT /student-preferences - Update saved preferences
"""

from fastapi import APIRouter, HTTPException, Depends

from eduopps.core.auth import get_current_user
from eduopps.services import preference_service
from eduopps.schemas.schemas import PreferencesUpdate, PreferencesResponse

router = APIRouter(prefix="/student-preferences", tags=["Student Preferences"])


@router.post("", response_model=PreferencesResponse, status_code=201)
async def set_preferences(request: PreferencesUpdate, user: dict = Depends(get_current_user)):
    return preference_service.set_preferences(user["id"], request.model_dump())


@router.get("", response_model=PreferencesResponse)
async def get_preferences(user: dict = Depends(get_current_user)):
    return preference_service.get_preferences_or_default(user["id"])


@router.put("", response_model=PreferencesResponse)
async def update_preferences(request: PreferencesUpdate, user: dict = Depends(get_current_user)):
    preferences = preference_service.update_preferences(user["id"], request.model_dump(exclude_unset=True))
    if preferences is None:
        raise HTTPException(status_code=404, detail="Preferences not found")
    return preferences
