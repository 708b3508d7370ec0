"""
Opportunity Browsing Service

PURPOSE:
Filter, sort and paginate an in-memory list of opportunities the same
way for every client (web list, mobile list, dashboards).

HOW IT WORKS:
1. The caller loads the opportunities visible to the user
2. filter_opportunities() runs the predicate chain:
   search -> my posts -> saved preferences -> manual filters -> expiry/registration
3. sort_opportunities() orders by one of the SortOption criteria
4. paginate() cuts a fixed-size page (PAGE_SIZE = 10)

Opportunities are plain dicts shaped like the `opportunities` table.
Everything here is pure: no database access, `now` is injectable.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Optional, Set, Tuple

PAGE_SIZE = 10
CLOSING_SOON_DAYS = 7

# Deadline badge colours used by the clients
COLOR_URGENT = "#dc2626"
COLOR_SOON = "#f59e0b"
COLOR_OK = "#10b981"


@dataclass
class OpportunityFilters:
    """Manual filters chosen by the user (all optional)."""
    search: Optional[str] = None
    created_by_id: Optional[int] = None
    industry: Optional[str] = None
    opportunity_type: Optional[str] = None
    age_groups: List[str] = field(default_factory=list)
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    show_expired: bool = True
    only_registered: bool = False


def _lower(value) -> str:
    return (value or "").lower()


def _as_datetime(value, end_of_day: bool = False) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    return value


def preferences_are_set(preferences: Optional[dict]) -> bool:
    """
    True when a student has saved at least one industry, age group or
    opportunity type. Locations alone do not count.
    """
    if not preferences:
        return False
    return any(preferences.get(key) for key in ("industries", "age_groups", "opportunity_types"))


def matches_preferences(opportunity: dict, preferences: dict) -> bool:
    """
    Saved-preference defaults. Each non-empty category must match:
    industry and type case-insensitively, age groups by intersection.
    """
    industries = preferences.get("industries") or []
    if industries:
        if _lower(opportunity.get("industry")) not in {_lower(i) for i in industries}:
            return False

    types = preferences.get("opportunity_types") or []
    if types:
        if _lower(opportunity.get("opportunity_type")) not in {_lower(t) for t in types}:
            return False

    age_groups = preferences.get("age_groups") or []
    if age_groups:
        if not set(age_groups) & set(opportunity.get("age_group") or []):
            return False

    return True


def matches_any_preference(opportunity: dict, preferences: dict) -> bool:
    """
    Looser list-endpoint narrowing: an opportunity qualifies when it
    matches ANY non-empty preference category. Exact comparisons.
    """
    checks = []
    if preferences.get("industries"):
        checks.append(opportunity.get("industry") in preferences["industries"])
    if preferences.get("opportunity_types"):
        checks.append(opportunity.get("opportunity_type") in preferences["opportunity_types"])
    if preferences.get("age_groups"):
        checks.append(bool(set(preferences["age_groups"]) & set(opportunity.get("age_group") or [])))
    return any(checks) if checks else True


def matches_filters(
    opportunity: dict,
    filters: OpportunityFilters,
    registered_ids: Set[int] = frozenset(),
    now: Optional[datetime] = None
) -> bool:
    """Manual filter chain; every active filter must pass."""
    if filters.search:
        needle = filters.search.lower()
        if needle not in _lower(opportunity.get("title")) and needle not in _lower(opportunity.get("organization")):
            return False

    if filters.created_by_id is not None and opportunity.get("created_by_id") != filters.created_by_id:
        return False

    if filters.industry and filters.industry != "all" and opportunity.get("industry") != filters.industry:
        return False

    if (
        filters.opportunity_type
        and filters.opportunity_type != "all"
        and opportunity.get("opportunity_type") != filters.opportunity_type
    ):
        return False

    if filters.age_groups:
        if not set(filters.age_groups) & set(opportunity.get("age_group") or []):
            return False

    if filters.location and filters.location.lower() not in _lower(opportunity.get("location")):
        return False

    # Date range only applies when both ends are given
    if filters.start_date and filters.end_date:
        start = opportunity.get("start_date")
        if start is None:
            return False
        if start < _as_datetime(filters.start_date) or start > _as_datetime(filters.end_date, end_of_day=True):
            return False

    if not filters.show_expired:
        now = now or datetime.utcnow()
        deadline = opportunity.get("application_deadline")
        if deadline is None or deadline < now:
            return False

    if filters.only_registered and opportunity.get("id") not in registered_ids:
        return False

    return True


def filter_opportunities(
    opportunities: Iterable[dict],
    filters: OpportunityFilters,
    preferences: Optional[dict] = None,
    registered_ids: Set[int] = frozenset(),
    now: Optional[datetime] = None
) -> List[dict]:
    """
    Run the full chain. `preferences` is only applied when it holds at
    least one category (see preferences_are_set).
    """
    apply_preferences = preferences_are_set(preferences)
    result = []
    for opp in opportunities:
        if apply_preferences and not matches_preferences(opp, preferences):
            continue
        if not matches_filters(opp, filters, registered_ids, now):
            continue
        result.append(opp)
    return result


def sort_opportunities(
    opportunities: List[dict],
    sort: str = "newest",
    interest_counts: Optional[Dict[int, int]] = None
) -> List[dict]:
    """
    Sort a copy of the list.

    newest/oldest: created_at; deadline: soonest first, missing last;
    popularity: interest count desc; title: A-Z; updated: most recent first.
    Unknown options keep the incoming order.
    """
    items = list(opportunities)
    counts = interest_counts or {}

    if sort == "newest":
        items.sort(key=lambda o: o["created_at"], reverse=True)
    elif sort == "oldest":
        items.sort(key=lambda o: o["created_at"])
    elif sort == "deadline":
        items.sort(key=lambda o: (o.get("application_deadline") is None, o.get("application_deadline") or datetime.max))
    elif sort == "popularity":
        items.sort(key=lambda o: counts.get(o["id"], 0), reverse=True)
    elif sort == "title":
        items.sort(key=lambda o: _lower(o.get("title")))
    elif sort == "updated":
        items.sort(key=lambda o: o["updated_at"], reverse=True)
    return items


def paginate(items: List[dict], page: int = 1, page_size: int = PAGE_SIZE) -> Tuple[List[dict], int]:
    """Return (page slice, total pages). Pages are 1-based."""
    page = max(page, 1)
    total_pages = math.ceil(len(items) / page_size) if items else 0
    start = (page - 1) * page_size
    return items[start:start + page_size], total_pages


def days_until(deadline: datetime, now: Optional[datetime] = None) -> int:
    """Whole days left, rounded up (a deadline later today counts as 1)."""
    now = now or datetime.utcnow()
    return math.ceil((deadline - now).total_seconds() / 86400)


def deadline_badge(deadline: datetime, now: Optional[datetime] = None) -> dict:
    """Label, colour and urgency of an application deadline."""
    days = days_until(deadline, now)
    if days < 0:
        return {"text": "Expired", "color": COLOR_URGENT, "is_urgent": True}
    if days == 0:
        return {"text": "Today", "color": COLOR_URGENT, "is_urgent": True}
    if days == 1:
        return {"text": "Tomorrow", "color": COLOR_SOON, "is_urgent": True}
    if days <= CLOSING_SOON_DAYS:
        return {"text": f"{days} days left", "color": COLOR_SOON, "is_urgent": True}
    return {"text": f"{days} days left", "color": COLOR_OK, "is_urgent": False}


def calculate_opportunity_stats(
    opportunities: Iterable[dict],
    registered_ids: Set[int] = frozenset(),
    now: Optional[datetime] = None
) -> dict:
    """Totals for dashboard tiles: active/expired/closing soon/registered."""
    stats = {"total": 0, "active": 0, "expired": 0, "registered": 0, "closing_soon": 0}
    now = now or datetime.utcnow()
    for opp in opportunities:
        stats["total"] += 1
        deadline = opp["application_deadline"]
        if deadline < now:
            stats["expired"] += 1
        else:
            stats["active"] += 1
            if days_until(deadline, now) <= CLOSING_SOON_DAYS:
                stats["closing_soon"] += 1
        if opp["id"] in registered_ids:
            stats["registered"] += 1
    return stats
