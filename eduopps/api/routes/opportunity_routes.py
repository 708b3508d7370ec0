"""
Opportunity Routes

POST /opportunities - Create opportunity (create permission)
GET /opportunities - Visible opportunities, newest first
GET /opportunities/browse - Filtered, sorted, paginated browsing
GET /opportunities/stats - Dashboard totals
GET /opportunities/search - Field search
GET /opportunities/with-registered-students - Opportunities with registrations
GET /opportunities/{opportunity_id} - Opportunity details
PUT /opportunities/{opportunity_id} - Update opportunity
DELETE /opportunities/{opportunity_id} - Delete opportunity
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends, Query
from loguru import logger
from typing import List, Optional

from eduopps.core.permissions import (
    can_edit_opportunity, can_view_opportunity, has_permission, is_superadmin, require_permission
)
from eduopps.services import interest_service, opportunity_service, preference_service
from eduopps.services.opportunity_filters import (
    PAGE_SIZE, OpportunityFilters, calculate_opportunity_stats, deadline_badge,
    filter_opportunities, paginate, preferences_are_set, sort_opportunities
)
from eduopps.schemas.schemas import (
    OpportunityCreate, OpportunityUpdate, OpportunityResponse, OpportunityPage,
    OpportunityStats, OpportunityWithRegistrations, BrowsedOpportunity, SortOption,
    MessageResponse, to_naive_utc
)

router = APIRouter(prefix="/opportunities", tags=["Opportunities"])

can_view = require_permission("can_view_opportunities")


def _saved_preferences(user: dict) -> Optional[dict]:
    """Preferences only shape results for users who manage their own."""
    if not has_permission(user, "can_manage_preferences"):
        return None
    return preference_service.get_preferences(user["id"])


def _get_opportunity_or_404(opportunity_id: int) -> dict:
    opportunity = opportunity_service.get_opportunity_by_id(opportunity_id)
    if not opportunity:
        raise HTTPException(status_code=404, detail="Opportunity not found")
    return opportunity


@router.post("", response_model=OpportunityResponse, status_code=201)
async def create_opportunity(
    request: OpportunityCreate,
    user: dict = Depends(require_permission("can_create_opportunities"))
):
    """Create a new opportunity. Non-superadmins post to their own school."""
    if request.is_global and not is_superadmin(user):
        raise HTTPException(status_code=403, detail="Only a superadmin can create global opportunities")

    opportunity = opportunity_service.create_opportunity(request.model_dump(), user)
    logger.info(f"Opportunity {opportunity['id']} created by user {user['id']}")
    return opportunity


@router.get("", response_model=List[OpportunityResponse])
async def list_opportunities(user: dict = Depends(can_view)):
    return opportunity_service.list_opportunities_for_user(user, _saved_preferences(user))


@router.get("/browse", response_model=OpportunityPage)
async def browse_opportunities(
    page: int = Query(1, ge=1),
    sort: SortOption = Query(SortOption.newest),
    search: Optional[str] = None,
    created_by_id: Optional[int] = None,
    industry: Optional[str] = None,
    opportunity_type: Optional[str] = None,
    age_groups: List[str] = Query([]),
    location: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    show_expired: bool = True,
    only_registered: bool = False,
    apply_preferences: bool = True,
    user: dict = Depends(can_view)
):
    """
    Browse visible opportunities.

    Saved preferences act as default filters unless apply_preferences=false.
    Page size is fixed at 10.
    """
    filters = OpportunityFilters(
        search=search,
        created_by_id=created_by_id,
        industry=industry,
        opportunity_type=opportunity_type,
        age_groups=age_groups,
        location=location,
        start_date=to_naive_utc(start_date),
        end_date=to_naive_utc(end_date),
        show_expired=show_expired,
        only_registered=only_registered,
    )
    preferences = _saved_preferences(user) if apply_preferences else None
    registered_ids = interest_service.get_registered_opportunity_ids(user["id"])
    counts = interest_service.get_interest_counts()
    now = datetime.utcnow()

    matches = filter_opportunities(
        opportunity_service.get_visible_opportunities(user), filters, preferences, registered_ids, now
    )
    ordered = sort_opportunities(matches, sort.value, counts)
    items, total_pages = paginate(ordered, page)

    return OpportunityPage(
        items=[
            BrowsedOpportunity(
                **opp,
                interest_count=counts.get(opp["id"], 0),
                is_registered=opp["id"] in registered_ids,
                deadline=deadline_badge(opp["application_deadline"], now),
            )
            for opp in items
        ],
        total=len(ordered),
        page=page,
        page_size=PAGE_SIZE,
        total_pages=total_pages,
        preferences_applied=preferences_are_set(preferences),
    )


@router.get("/stats", response_model=OpportunityStats)
async def opportunity_stats(user: dict = Depends(can_view)):
    registered_ids = interest_service.get_registered_opportunity_ids(user["id"])
    return calculate_opportunity_stats(opportunity_service.get_visible_opportunities(user), registered_ids)


@router.get("/search", response_model=List[OpportunityResponse])
async def search_opportunities(
    query: Optional[str] = None,
    industry: Optional[str] = None,
    age_group: Optional[str] = None,
    location: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    ethnicity_focus: Optional[str] = None,
    gender_focus: Optional[str] = None,
    is_virtual: Optional[bool] = None,
    created_by_id: Optional[int] = None,
    user: dict = Depends(can_view)
):
    """Text search on title, organization and description plus field filters."""
    return opportunity_service.search_opportunities(user, {
        "query": query,
        "industry": industry,
        "age_group": age_group,
        "location": location,
        "start_date": to_naive_utc(start_date),
        "end_date": to_naive_utc(end_date),
        "ethnicity_focus": ethnicity_focus,
        "gender_focus": gender_focus,
        "is_virtual": is_virtual,
        "created_by_id": created_by_id,
    })


@router.get("/with-registered-students", response_model=List[OpportunityWithRegistrations])
async def opportunities_with_registered_students(user: dict = Depends(can_view)):
    return opportunity_service.get_opportunities_with_registered_students(user)


@router.get("/{opportunity_id}", response_model=OpportunityResponse)
async def get_opportunity(opportunity_id: int, user: dict = Depends(can_view)):
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_view_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have access to this opportunity")
    return opportunity


@router.put("/{opportunity_id}", response_model=OpportunityResponse)
async def update_opportunity(
    opportunity_id: int,
    request: OpportunityUpdate,
    user: dict = Depends(can_view)
):
    """Update an opportunity. Only a superadmin can change global visibility."""
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_edit_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have permission to edit this opportunity")

    updates = request.model_dump(exclude_unset=True)
    if (
        updates.get("is_global") is not None
        and updates["is_global"] != opportunity["is_global"]
        and not is_superadmin(user)
    ):
        raise HTTPException(status_code=403, detail="Only a superadmin can change global visibility")

    start = updates.get("start_date") or opportunity["start_date"]
    end = updates.get("end_date") or opportunity["end_date"]
    if end < start:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")

    return opportunity_service.update_opportunity(opportunity_id, updates)


@router.delete("/{opportunity_id}", response_model=MessageResponse)
async def delete_opportunity(opportunity_id: int, user: dict = Depends(can_view)):
    opportunity = _get_opportunity_or_404(opportunity_id)
    if not can_edit_opportunity(user, opportunity):
        raise HTTPException(status_code=403, detail="You do not have permission to delete this opportunity")

    opportunity_service.delete_opportunity(opportunity_id)
    logger.info(f"Opportunity {opportunity_id} deleted by user {user['id']}")
    return MessageResponse(message="Opportunity deleted successfully")
