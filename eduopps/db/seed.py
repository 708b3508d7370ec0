"""
Schema bootstrap and default data.

init_db() creates missing tables and seeds the five default roles and
the stock filter options. Both seeders are idempotent.
"""

from loguru import logger
from sqlalchemy import func, insert, select

from eduopps.db.database import engine, get_db_session
from eduopps.db.schema import PERMISSION_FLAGS, filter_options, metadata, user_roles

_ALL = set(PERMISSION_FLAGS)

DEFAULT_ROLES = {
    "student": {
        "description": "Browses opportunities and registers interest",
        "flags": {"can_view_opportunities", "can_manage_preferences"},
        "requires_school": True,
    },
    "teacher": {
        "description": "Posts and manages opportunities for their school",
        "flags": {
            "can_create_opportunities", "can_edit_own_opportunities",
            "can_edit_school_opportunities", "can_view_opportunities",
            "can_upload_documents", "can_view_attendees",
        },
        "requires_school": True,
    },
    "moderator": {
        "description": "Teacher with news feed moderation",
        "flags": {
            "can_create_opportunities", "can_edit_own_opportunities",
            "can_edit_school_opportunities", "can_view_opportunities",
            "can_upload_documents", "can_view_attendees", "can_manage_news",
        },
        "requires_school": True,
    },
    "admin": {
        "description": "School administrator",
        "flags": _ALL - {"can_edit_all_opportunities", "can_manage_schools", "can_manage_preferences"},
        "requires_school": True,
    },
    "superadmin": {
        "description": "Platform administrator across all schools",
        "flags": _ALL - {"can_manage_preferences"},
        "requires_school": False,
    },
}

DEFAULT_FILTER_OPTIONS = {
    "ageGroup": [
        ("14-15", "14-15 years"), ("16-18", "16-18 years"), ("19-21", "19-21 years"),
        ("22-24", "22-24 years"), ("25+", "25+ years"),
    ],
    "industry": [
        ("technology", "Technology"), ("healthcare", "Healthcare"), ("finance", "Finance"),
        ("education", "Education"), ("engineering", "Engineering"),
        ("arts", "Arts & Entertainment"), ("nonprofit", "Non-profit"), ("government", "Government"),
    ],
    "opportunityType": [
        ("internship", "Internship"), ("job", "Job"), ("volunteer", "Volunteer"),
        ("workshop", "Workshop"), ("course", "Course"), ("scholarship", "Scholarship"),
    ],
}


def seed_roles() -> int:
    """Insert any default role that does not exist yet. Returns number inserted."""
    inserted = 0
    with get_db_session() as db:
        existing = set(db.execute(select(user_roles.c.name)).scalars().all())
        for name, role in DEFAULT_ROLES.items():
            if name in existing:
                continue
            values = {flag: flag in role["flags"] for flag in PERMISSION_FLAGS}
            values.update(
                name=name,
                description=role["description"],
                requires_school=role["requires_school"],
            )
            db.execute(insert(user_roles).values(**values))
            inserted += 1
    if inserted:
        logger.info(f"Seeded {inserted} user roles")
    return inserted


def seed_filter_options() -> int:
    """Seed stock filter options when the table is empty."""
    with get_db_session() as db:
        count = db.execute(select(func.count()).select_from(filter_options)).scalar_one()
        if count:
            return 0
        rows = [
            {"category": category, "value": value, "label": label}
            for category, options in DEFAULT_FILTER_OPTIONS.items()
            for value, label in options
        ]
        db.execute(insert(filter_options), rows)
    logger.info(f"Seeded {len(rows)} filter options")
    return len(rows)


def init_db(seed: bool = True):
    """Create tables and (optionally) default data."""
    metadata.create_all(bind=engine)
    if seed:
        seed_roles()
        seed_filter_options()
