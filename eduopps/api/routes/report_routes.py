"""
Report Routes (view reports)

GET /reports/opportunities - Opportunity totals by industry and age group
GET /reports/interests - Registrations per opportunity
GET /reports/teacher-activity?period=week|month - Opportunities posted per teacher
"""

from fastapi import APIRouter, Depends, Query
from typing import Dict

from eduopps.core.permissions import require_permission
from eduopps.services import report_service
from eduopps.schemas.schemas import ActivityPeriod, OpportunityReport, TeacherActivityReport

router = APIRouter(prefix="/reports", tags=["Reports"])

view_reports = require_permission("can_view_reports")


@router.get("/opportunities", response_model=OpportunityReport)
async def opportunity_report(user: dict = Depends(view_reports)):
    return report_service.opportunity_report()


@router.get("/interests", response_model=Dict[int, int])
async def interest_report(user: dict = Depends(view_reports)):
    return report_service.interest_counts()


@router.get("/teacher-activity", response_model=TeacherActivityReport)
async def teacher_activity_report(
    period: ActivityPeriod = Query(ActivityPeriod.all),
    user: dict = Depends(view_reports)
):
    return report_service.teacher_activity(period.value)
