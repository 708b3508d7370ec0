"""
Opportunity persistence and visibility-scoped queries.

Visibility (who may see an opportunity) lives in core.permissions;
this module loads rows and narrows them. Array-valued columns are JSON,
so membership tests (age groups, shared schools) run in Python after
the SQL query.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, insert, or_, select, update

from eduopps.core.permissions import can_view_opportunity, has_permission, is_superadmin
from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import opportunities, student_interests
from eduopps.services.opportunity_filters import matches_any_preference, preferences_are_set

# Columns that cannot be cleared by an update
REQUIRED_FIELDS = {
    "title", "organization", "description", "start_date", "end_date",
    "application_deadline", "location", "is_virtual", "opportunity_type",
    "industry", "age_group", "is_global", "visible_to_schools",
}


def create_opportunity(data: dict, creator: dict) -> dict:
    """
    Insert an opportunity owned by `creator`.

    Only a superadmin may publish globally or pick another school;
    everybody else posts to their own school.
    """
    values = dict(data)
    values["created_by_id"] = creator["id"]
    if not is_superadmin(creator):
        values["school_id"] = creator.get("school_id")
        values["is_global"] = False
    elif values.get("school_id") is None:
        values["school_id"] = creator.get("school_id")
    values["visible_to_schools"] = values.get("visible_to_schools") or []

    with get_db_session() as db:
        result = db.execute(insert(opportunities).values(**values))
        opportunity_id = result.inserted_primary_key[0]
    return get_opportunity_by_id(opportunity_id)


def get_opportunity_by_id(opportunity_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(opportunities).where(opportunities.c.id == opportunity_id)).fetchone()
    return row_to_dict(row)


def _load(query) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(query).fetchall()
    return [row_to_dict(r) for r in rows]


def get_visible_opportunities(user: dict) -> List[dict]:
    """
    Every opportunity the user can see, newest first.

    Users with can_edit_all_opportunities (and superadmins) see all rows;
    others see their school's, global ones and those shared with them.
    """
    query = select(opportunities).order_by(opportunities.c.created_at.desc(), opportunities.c.id.desc())
    if is_superadmin(user) or has_permission(user, "can_edit_all_opportunities"):
        return _load(query)

    # visible_to_schools is JSON, so visibility is checked in Python
    return [opp for opp in _load(query) if can_view_opportunity(user, opp)]


def list_opportunities_for_user(user: dict, preferences: Optional[dict] = None) -> List[dict]:
    """
    The plain list endpoint: visible opportunities, narrowed for users
    with saved preferences to those matching any preference category.
    """
    items = get_visible_opportunities(user)
    if is_superadmin(user) or has_permission(user, "can_edit_all_opportunities"):
        return items
    if preferences_are_set(preferences):
        items = [opp for opp in items if matches_any_preference(opp, preferences)]
    return items


def search_opportunities(user: dict, criteria: dict) -> List[dict]:
    """
    Field search over the opportunities visible to `user`.

    criteria keys (all optional): query, industry, age_group, location,
    start_date, end_date, ethnicity_focus, gender_focus, is_virtual,
    created_by_id.
    """
    query = select(opportunities).order_by(opportunities.c.created_at.desc(), opportunities.c.id.desc())

    text_query = criteria.get("query")
    if text_query:
        pattern = f"%{text_query.lower()}%"
        query = query.where(or_(
            func.lower(opportunities.c.title).like(pattern),
            func.lower(opportunities.c.organization).like(pattern),
            func.lower(opportunities.c.description).like(pattern),
        ))
    if criteria.get("industry"):
        query = query.where(opportunities.c.industry == criteria["industry"])
    if criteria.get("location"):
        query = query.where(func.lower(opportunities.c.location).like(f"%{criteria['location'].lower()}%"))
    if criteria.get("start_date"):
        query = query.where(opportunities.c.start_date >= criteria["start_date"])
    if criteria.get("end_date"):
        query = query.where(opportunities.c.end_date <= criteria["end_date"])
    if criteria.get("ethnicity_focus"):
        query = query.where(opportunities.c.ethnicity_focus == criteria["ethnicity_focus"])
    if criteria.get("gender_focus"):
        query = query.where(opportunities.c.gender_focus == criteria["gender_focus"])
    if criteria.get("is_virtual") is not None:
        query = query.where(opportunities.c.is_virtual == criteria["is_virtual"])
    if criteria.get("created_by_id") is not None:
        query = query.where(opportunities.c.created_by_id == criteria["created_by_id"])

    rows = [opp for opp in _load(query) if can_view_opportunity(user, opp)]

    age_group = criteria.get("age_group")
    if age_group:
        rows = [opp for opp in rows if age_group in (opp["age_group"] or [])]
    return rows


def get_opportunities_with_registered_students(user: dict) -> List[dict]:
    """Visible opportunities that have at least one registration, with the count."""
    with get_db_session() as db:
        counts = dict(db.execute(
            select(student_interests.c.opportunity_id, func.count(student_interests.c.id))
            .group_by(student_interests.c.opportunity_id)
        ).fetchall())

    result = []
    for opp in get_visible_opportunities(user):
        if counts.get(opp["id"]):
            result.append({**opp, "registered_count": counts[opp["id"]]})
    return result


def update_opportunity(opportunity_id: int, updates: dict) -> Optional[dict]:
    """
    Apply a partial update. Blank optional text becomes NULL; a None
    for a required column is ignored rather than clearing it.
    """
    values = {k: v for k, v in updates.items() if not (v is None and k in REQUIRED_FIELDS)}
    if values:
        values["updated_at"] = datetime.utcnow()
        with get_db_session() as db:
            db.execute(update(opportunities).where(opportunities.c.id == opportunity_id).values(**values))
    return get_opportunity_by_id(opportunity_id)


def delete_opportunity(opportunity_id: int) -> bool:
    """Removes documents, interests and form requests through cascades."""
    with get_db_session() as db:
        result = db.execute(delete(opportunities).where(opportunities.c.id == opportunity_id))
        return result.rowcount > 0
