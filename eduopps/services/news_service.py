"""School news feed posts."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, insert, or_, select, update

from eduopps.core.permissions import is_superadmin
from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import news_posts

REQUIRED_FIELDS = {"title", "content", "is_global"}


def create_post(data: dict, author: dict) -> dict:
    """Non-superadmins always post to their own school, never globally."""
    values = dict(data)
    values["author_id"] = author["id"]
    if not is_superadmin(author):
        values["school_id"] = author.get("school_id")
        values["is_global"] = False
    elif values.get("school_id") is None:
        values["school_id"] = author.get("school_id")

    with get_db_session() as db:
        result = db.execute(insert(news_posts).values(**values))
        post_id = result.inserted_primary_key[0]
    return get_post_by_id(post_id)


def get_post_by_id(post_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(news_posts).where(news_posts.c.id == post_id)).fetchone()
    return row_to_dict(row)


def get_posts_for_user(user: dict) -> List[dict]:
    """School posts plus global ones, newest first (superadmin: everything)."""
    query = select(news_posts).order_by(news_posts.c.created_at.desc(), news_posts.c.id.desc())
    if not is_superadmin(user):
        visible = [news_posts.c.is_global.is_(True)]
        if user.get("school_id") is not None:
            visible.append(news_posts.c.school_id == user["school_id"])
        query = query.where(or_(*visible))
    with get_db_session() as db:
        rows = db.execute(query).fetchall()
    return [row_to_dict(r) for r in rows]


def update_post(post_id: int, updates: dict) -> Optional[dict]:
    updates = {k: v for k, v in updates.items() if not (v is None and k in REQUIRED_FIELDS)}
    if updates:
        updates["updated_at"] = datetime.utcnow()
        with get_db_session() as db:
            db.execute(update(news_posts).where(news_posts.c.id == post_id).values(**updates))
    return get_post_by_id(post_id)


def delete_post(post_id: int) -> bool:
    with get_db_session() as db:
        result = db.execute(delete(news_posts).where(news_posts.c.id == post_id))
        return result.rowcount > 0


def like_post(post_id: int) -> Optional[dict]:
    with get_db_session() as db:
        db.execute(
            update(news_posts)
            .where(news_posts.c.id == post_id)
            .values(likes=news_posts.c.likes + 1)
        )
    return get_post_by_id(post_id)
