"""
System settings (key/value) and the filter options shown in the
opportunity filter sidebars.
"""

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import insert, select, update

from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import filter_options, system_settings

REQUIRED_OPTION_FIELDS = {"category", "value", "label", "is_active"}


# ============================================================
# SYSTEM SETTINGS
# ============================================================

def get_setting(key: str) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(system_settings).where(system_settings.c.key == key)).fetchone()
    return row_to_dict(row)


def upsert_setting(key: str, value: str, description: Optional[str], updated_by_id: int) -> dict:
    values = {"value": value, "updated_by_id": updated_by_id, "updated_at": datetime.utcnow()}
    if description is not None:
        values["description"] = description

    existing = get_setting(key)
    with get_db_session() as db:
        if existing:
            db.execute(update(system_settings).where(system_settings.c.key == key).values(**values))
        else:
            db.execute(insert(system_settings).values(key=key, **values))
    return get_setting(key)


def get_settings_map() -> Dict[str, str]:
    with get_db_session() as db:
        rows = db.execute(select(system_settings.c.key, system_settings.c.value)).fetchall()
    return {key: value for key, value in rows}


# ============================================================
# FILTER OPTIONS
# ============================================================

def get_filter_option(option_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(filter_options).where(filter_options.c.id == option_id)).fetchone()
    return row_to_dict(row)


def get_active_filter_options(category: Optional[str] = None) -> List[dict]:
    """Active options; one category ordered by label, or all by category then label."""
    query = select(filter_options).where(filter_options.c.is_active.is_(True))
    if category:
        query = query.where(filter_options.c.category == category).order_by(filter_options.c.label)
    else:
        query = query.order_by(filter_options.c.category, filter_options.c.label)
    with get_db_session() as db:
        rows = db.execute(query).fetchall()
    return [row_to_dict(r) for r in rows]


def create_filter_option(data: dict, created_by_id: int) -> dict:
    with get_db_session() as db:
        result = db.execute(insert(filter_options).values(**data, created_by_id=created_by_id))
        option_id = result.inserted_primary_key[0]
    return get_filter_option(option_id)


def update_filter_option(option_id: int, updates: dict) -> Optional[dict]:
    updates = {k: v for k, v in updates.items() if not (v is None and k in REQUIRED_OPTION_FIELDS)}
    if updates:
        with get_db_session() as db:
            db.execute(update(filter_options).where(filter_options.c.id == option_id).values(**updates))
    return get_filter_option(option_id)


def deactivate_filter_option(option_id: int) -> bool:
    """Soft delete: the option stays in the table but is no longer listed."""
    with get_db_session() as db:
        result = db.execute(
            update(filter_options).where(filter_options.c.id == option_id).values(is_active=False)
        )
        return result.rowcount > 0
