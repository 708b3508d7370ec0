"""
Student Interest Routes

POST /student-interests - Register interest in an opportunity
DELETE /student-interests/{opportunity_id} - Withdraw interest
GET /student-interests/student - My registrations
GET /student-interests/counts - Registrations per opportunity
GET /student-interests/opportunity/{opportunity_id} - Attendee list
GET /student-interests/opportunity/{opportunity_id}/csv - Attendee list as CSV
"""

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import Response
from typing import Dict, List

from eduopps.core.auth import get_current_user
from eduopps.core.permissions import can_view_attendees, can_view_opportunity
from eduopps.services import interest_service, opportunity_service
from eduopps.services.interest_service import CapacityReachedError
from eduopps.schemas.schemas import InterestCreate, InterestResponse, AttendeeResponse, MessageResponse

router = APIRouter(prefix="/student-interests", tags=["Student Interests"])


def _get_opportunity_or_404(opportunity_id: int) -> dict:
    opportunity = opportunity_service.get_opportunity_by_id(opportunity_id)
    if not opportunity:
        raise HTTPException(status_code=404, detail="Opportunity not found")
    return opportunity


def _attendee_opportunity(opportunity_id: int, user: dict) -> dict:
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_view_attendees(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have permission to view attendees")
    return opportunity


@router.post("", response_model=InterestResponse, status_code=201)
async def register_interest(request: InterestCreate, user: dict = Depends(get_current_user)):
    """Register the current user. Registering twice returns the existing registration."""
    opportunity = _get_opportunity_or_404(request.opportunity_id)
    if not can_view_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have access to this opportunity")

    try:
        return interest_service.register_interest(user["id"], opportunity, request.notes)
    except CapacityReachedError:
        raise HTTPException(status_code=409, detail="No spaces left")


@router.delete("/{opportunity_id}", response_model=MessageResponse)
async def remove_interest(opportunity_id: int, user: dict = Depends(get_current_user)):
    if not interest_service.remove_interest(user["id"], opportunity_id):
        raise HTTPException(status_code=404, detail="Interest not found")
    return MessageResponse(message="Interest removed successfully")


@router.get("/student")
async def my_interests(user: dict = Depends(get_current_user)):
    """Own registrations with opportunity title, organization and dates."""
    return interest_service.get_student_interests(user["id"])


@router.get("/counts", response_model=Dict[int, int])
async def interest_counts(user: dict = Depends(get_current_user)):
    return interest_service.get_interest_counts()


@router.get("/opportunity/{opportunity_id}", response_model=List[AttendeeResponse])
async def get_attendees(opportunity_id: int, user: dict = Depends(get_current_user)):
    _attendee_opportunity(opportunity_id, user)
    return interest_service.get_attendees(opportunity_id)


@router.get("/opportunity/{opportunity_id}/csv")
async def export_attendees(opportunity_id: int, user: dict = Depends(get_current_user)):
    """Attendee list download (Name, Email, Username, School, Registration Date)."""
    opportunity = _attendee_opportunity(opportunity_id, user)
    content = interest_service.build_attendees_csv(interest_service.get_attendees(opportunity_id))
    filename = interest_service.attendees_csv_filename(opportunity["title"])
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
