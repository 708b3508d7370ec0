"""Student preference storage (one row per user)."""

from datetime import datetime
from typing import Optional

from sqlalchemy import insert, select, update

from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import student_preferences
from eduopps.services.opportunity_filters import preferences_are_set

PREFERENCE_FIELDS = ("industries", "age_groups", "opportunity_types", "locations")


def get_preferences(user_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            select(student_preferences).where(student_preferences.c.user_id == user_id)
        ).fetchone()
    return row_to_dict(row)


def get_preferences_or_default(user_id: int) -> dict:
    """Saved preferences, or empty lists when nothing is saved yet."""
    prefs = get_preferences(user_id) or {
        "id": None, "user_id": user_id, "created_at": None, "updated_at": None,
        **{field: [] for field in PREFERENCE_FIELDS},
    }
    prefs["has_preferences"] = preferences_are_set(prefs)
    return prefs


def set_preferences(user_id: int, data: dict) -> dict:
    """Insert or replace the user's preferences."""
    values = {field: data.get(field) or [] for field in PREFERENCE_FIELDS}
    existing = get_preferences(user_id)
    with get_db_session() as db:
        if existing:
            db.execute(
                update(student_preferences)
                .where(student_preferences.c.user_id == user_id)
                .values(**values, updated_at=datetime.utcnow())
            )
        else:
            db.execute(insert(student_preferences).values(user_id=user_id, **values))
    return get_preferences_or_default(user_id)


def update_preferences(user_id: int, updates: dict) -> Optional[dict]:
    """Partial update; None when the user has no saved preferences."""
    if not get_preferences(user_id):
        return None
    values = {k: v for k, v in updates.items() if k in PREFERENCE_FIELDS and v is not None}
    values["updated_at"] = datetime.utcnow()
    with get_db_session() as db:
        db.execute(
            update(student_preferences)
            .where(student_preferences.c.user_id == user_id)
            .values(**values)
        )
    return get_preferences_or_default(user_id)
