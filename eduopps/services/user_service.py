"""
User, role and school-membership queries.

Rows are returned as plain dicts; password hashes never leave this
module except through get_user_by_email(..., include_password=True),
which login uses.
"""

from typing import List, Optional

from sqlalchemy import insert, select, update

from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import PERMISSION_FLAGS, schools, user_roles, users

PUBLIC_USER_COLUMNS = [c for c in users.c if c.name != "password_hash"]
USERS_WITH_ROLE = users.join(user_roles, users.c.role_id == user_roles.c.id)
REQUIRED_USER_FIELDS = {"email", "username", "first_name", "last_name", "role_id", "is_active"}


def _user_select(include_password: bool = False):
    columns = list(users.c) if include_password else list(PUBLIC_USER_COLUMNS)
    return select(*columns, user_roles.c.name.label("role")).select_from(USERS_WITH_ROLE)


def get_user_by_id(user_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(_user_select().where(users.c.id == user_id)).fetchone()
    return row_to_dict(row)


def get_user_by_email(email: str, include_password: bool = False) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            _user_select(include_password).where(users.c.email == email.lower())
        ).fetchone()
    return row_to_dict(row)


def get_user_by_username(username: str) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(_user_select().where(users.c.username == username)).fetchone()
    return row_to_dict(row)


def get_user_with_permissions(user_id: int) -> Optional[dict]:
    """User joined with role permissions and school summary."""
    with get_db_session() as db:
        row = db.execute(
            select(*PUBLIC_USER_COLUMNS, user_roles)
            .select_from(USERS_WITH_ROLE)
            .where(users.c.id == user_id)
        ).fetchone()
        if row is None:
            return None
        data = row._mapping
        user = {c.name: data[c] for c in PUBLIC_USER_COLUMNS}
        user["role"] = data[user_roles.c.name]
        user["permissions"] = {flag: bool(data[user_roles.c[flag]]) for flag in PERMISSION_FLAGS}
        user["requires_school"] = bool(data[user_roles.c.requires_school])

        user["school"] = None
        if user["school_id"]:
            school = db.execute(
                select(schools.c.id, schools.c.name, schools.c.logo_url, schools.c.description)
                .where(schools.c.id == user["school_id"])
            ).fetchone()
            user["school"] = row_to_dict(school)
    return user


def create_user(data: dict, password_hash: str) -> dict:
    values = {
        "email": data["email"].lower(),
        "username": data["username"],
        "password_hash": password_hash,
        "first_name": data["first_name"],
        "last_name": data["last_name"],
        "role_id": data["role_id"],
        "school_id": data.get("school_id"),
        "profile_picture": data.get("profile_picture"),
    }
    with get_db_session() as db:
        result = db.execute(insert(users).values(**values))
        user_id = result.inserted_primary_key[0]
    return get_user_by_id(user_id)


def update_user(user_id: int, updates: dict) -> Optional[dict]:
    """Partial update; null is ignored for columns that cannot be empty."""
    updates = {k: v for k, v in updates.items() if not (v is None and k in REQUIRED_USER_FIELDS)}
    if "email" in updates:
        updates["email"] = updates["email"].lower()
    if updates:
        with get_db_session() as db:
            db.execute(update(users).where(users.c.id == user_id).values(**updates))
    return get_user_by_id(user_id)


def get_users_by_school(school_id: int, role: Optional[str] = None) -> List[dict]:
    query = (
        _user_select()
        .add_columns(user_roles.c.description.label("role_description"))
        .where(users.c.school_id == school_id)
    )
    if role and role != "all":
        query = query.where(user_roles.c.name == role)
    with get_db_session() as db:
        rows = db.execute(query.order_by(users.c.created_at.desc(), users.c.id.desc())).fetchall()
    return [row_to_dict(r) for r in rows]


def get_users_by_role(role: str) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            _user_select()
            .where(user_roles.c.name == role)
            .order_by(users.c.last_name, users.c.first_name)
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def get_roles() -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(select(user_roles).order_by(user_roles.c.name)).fetchall()
    return [row_to_dict(r) for r in rows]


def get_role_by_id(role_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(user_roles).where(user_roles.c.id == role_id)).fetchone()
    return row_to_dict(row)


def get_role_by_name(name: str) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(user_roles).where(user_roles.c.name == name)).fetchone()
    return row_to_dict(row)
