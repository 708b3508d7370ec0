"""
Role permission checks.

Every rule works from the flags on the user's role (see db/seed.py for
the defaults) plus ownership and school membership. The user dict is
the one produced by core.auth.get_current_user.
"""

from fastapi import Depends, HTTPException

from eduopps.core.auth import get_current_user
from eduopps.db.schema import PERMISSION_FLAGS

SUPERADMIN = "superadmin"


def has_permission(user: dict, flag: str) -> bool:
    return bool(user.get("permissions", {}).get(flag))


def is_superadmin(user: dict) -> bool:
    return user.get("role") == SUPERADMIN


def require_permission(flag: str):
    """
    Dependency factory - 403 unless the user's role carries `flag`.

    Usage:
        @router.post("", dependencies=[Depends(require_permission("can_manage_schools"))])
    """
    if flag not in PERMISSION_FLAGS:
        raise ValueError(f"Unknown permission flag: {flag}")

    async def checker(user: dict = Depends(get_current_user)) -> dict:
        if not has_permission(user, flag):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return checker


def _same_school(user: dict, school_id) -> bool:
    return user.get("school_id") is not None and user.get("school_id") == school_id


def is_visible_to_school(opportunity: dict, school_id) -> bool:
    """Own school, global, or explicitly shared with the school."""
    if opportunity.get("is_global"):
        return True
    if school_id is None:
        return False
    return opportunity.get("school_id") == school_id or school_id in (opportunity.get("visible_to_schools") or [])


def can_view_opportunity(user: dict, opportunity: dict) -> bool:
    if is_superadmin(user) or has_permission(user, "can_edit_all_opportunities"):
        return True
    return is_visible_to_school(opportunity, user.get("school_id"))


def can_edit_opportunity(user: dict, opportunity: dict) -> bool:
    if has_permission(user, "can_edit_all_opportunities"):
        return True
    if has_permission(user, "can_edit_school_opportunities") and _same_school(user, opportunity.get("school_id")):
        return True
    return opportunity.get("created_by_id") == user["id"]


def can_view_attendees(user: dict, opportunity: dict) -> bool:
    if has_permission(user, "can_edit_all_opportunities"):
        return True
    if has_permission(user, "can_view_attendees") and _same_school(user, opportunity.get("school_id")):
        return True
    return opportunity.get("created_by_id") == user["id"]


def can_upload_document(user: dict, opportunity: dict) -> bool:
    if has_permission(user, "can_edit_all_opportunities"):
        return True
    if not has_permission(user, "can_upload_documents"):
        return False
    return _same_school(user, opportunity.get("school_id")) or opportunity.get("created_by_id") == user["id"]


def can_delete_document(user: dict, opportunity: dict, document: dict) -> bool:
    return can_edit_opportunity(user, opportunity) or document.get("uploaded_by_id") == user["id"]


def can_view_news_post(user: dict, post: dict) -> bool:
    return is_superadmin(user) or post.get("is_global") or _same_school(user, post.get("school_id"))


def can_manage_news_post(user: dict, post: dict) -> bool:
    if is_superadmin(user):
        return True
    if has_permission(user, "can_manage_news") and _same_school(user, post.get("school_id")):
        return True
    return post.get("author_id") == user["id"]


def ui_capabilities(user: dict) -> dict:
    """Navigation sections the clients show for this user."""
    perms = user.get("permissions", {})
    administration = any(
        perms.get(flag) for flag in ("can_manage_users", "can_manage_schools", "can_manage_settings")
    )
    return {
        "opportunities": bool(perms.get("can_view_opportunities")),
        "create_opportunity": bool(perms.get("can_create_opportunities")),
        "documents": bool(perms.get("can_upload_documents")),
        "attendees": bool(perms.get("can_view_attendees")),
        "news": bool(perms.get("can_manage_news")),
        "reports": bool(perms.get("can_view_reports")),
        "preferences": bool(perms.get("can_manage_preferences")),
        "administration": administration,
        "user_management": bool(perms.get("can_manage_users")),
        "school_management": bool(perms.get("can_manage_schools")),
        "system_settings": bool(perms.get("can_manage_settings")),
    }
