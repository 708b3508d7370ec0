"""School (tenant) CRUD."""

from typing import List, Optional

from sqlalchemy import delete, insert, select, update

from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import schools


def create_school(data: dict) -> dict:
    with get_db_session() as db:
        result = db.execute(insert(schools).values(**data))
        school_id = result.inserted_primary_key[0]
    return get_school_by_id(school_id)


def get_school_by_id(school_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(schools).where(schools.c.id == school_id)).fetchone()
    return row_to_dict(row)


def get_all_schools() -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(select(schools).order_by(schools.c.name)).fetchall()
    return [row_to_dict(r) for r in rows]


def update_school(school_id: int, updates: dict) -> Optional[dict]:
    updates = {k: v for k, v in updates.items() if not (v is None and k == "name")}
    if updates:
        with get_db_session() as db:
            db.execute(update(schools).where(schools.c.id == school_id).values(**updates))
    return get_school_by_id(school_id)


def delete_school(school_id: int) -> bool:
    """Cascades to the school's users, opportunities and news posts."""
    with get_db_session() as db:
        result = db.execute(delete(schools).where(schools.c.id == school_id))
        return result.rowcount > 0
