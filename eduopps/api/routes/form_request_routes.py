"""
Form Request Routes

POST /form-requests - Request application forms by e-mail
GET /form-requests/my-requests - My form requests
GET /form-requests/student?student_id= - A student's form requests
GET /form-requests/opportunity/{opportunity_id} - Requests for an opportunity
PUT /form-requests/{request_id}/mark-sent - Mark forms as sent manually
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Optional

from eduopps.core.auth import get_current_user
from eduopps.core.permissions import can_edit_opportunity, can_view_opportunity, is_superadmin, require_permission
from eduopps.services import form_request_service, opportunity_service, user_service
from eduopps.services.form_request_service import DuplicateFormRequestError
from eduopps.schemas.schemas import (
    FormRequestCreate, FormRequestResponse, FormRequestCreatedResponse, MessageResponse
)

router = APIRouter(prefix="/form-requests", tags=["Form Requests"])


def _get_opportunity_or_404(opportunity_id: int) -> dict:
    opportunity = opportunity_service.get_opportunity_by_id(opportunity_id)
    if not opportunity:
        raise HTTPException(status_code=404, detail="Opportunity not found")
    return opportunity


@router.post("", response_model=FormRequestCreatedResponse, status_code=201)
async def request_forms(
    request: FormRequestCreate,
    user: dict = Depends(require_permission("can_view_opportunities"))
):
    """
    Ask for an opportunity's application forms.

    Matching documents are e-mailed as download links valid for 7 days.
    """
    opportunity = _get_opportunity_or_404(request.opportunity_id)
    if not can_view_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have access to this opportunity")

    try:
        return form_request_service.create_form_request(user, opportunity)
    except DuplicateFormRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/my-requests", response_model=List[FormRequestResponse])
async def my_requests(user: dict = Depends(get_current_user)):
    return form_request_service.get_requests_by_student(user["id"])


@router.get("/student", response_model=List[FormRequestResponse])
async def student_requests(
    student_id: Optional[int] = Query(None),
    user: dict = Depends(get_current_user)
):
    """Students see their own; staff see students of their school; superadmins anyone."""
    if user["role"] == "student" or student_id is None:
        return form_request_service.get_requests_by_student(user["id"])

    if not is_superadmin(user):
        student = user_service.get_user_by_id(student_id)
        if not student or student["school_id"] is None or student["school_id"] != user.get("school_id"):
            raise HTTPException(status_code=403, detail="You can only view students from your school")

    return form_request_service.get_requests_by_student(student_id)


@router.get("/opportunity/{opportunity_id}", response_model=List[FormRequestResponse])
async def opportunity_requests(opportunity_id: int, user: dict = Depends(get_current_user)):
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_edit_opportunity(user, opportunity):
        raise HTTPException(
            status_code=403,
            detail="You do not have permission to view form requests for this opportunity"
        )
    return form_request_service.get_requests_by_opportunity(opportunity_id)


@router.put("/{request_id}/mark-sent", response_model=MessageResponse)
async def mark_sent(request_id: int, user: dict = Depends(get_current_user)):
    form_request = form_request_service.get_form_request_by_id(request_id)
    if not form_request:
        raise HTTPException(status_code=404, detail="Form request not found")

    opportunity = _get_opportunity_or_404(form_request["opportunity_id"])
    if user["role"] == "student" or not can_edit_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have permission to update this form request")

    form_request_service.mark_email_sent(request_id)
    return MessageResponse(message="Form request marked as sent")
