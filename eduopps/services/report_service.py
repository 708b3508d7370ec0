"""
Report Service - aggregate numbers for the reports dashboard.

Reports:
1. opportunity_report()  - totals by industry / age group, active vs expired
2. interest_counts()     - registrations per opportunity
3. teacher_activity()    - opportunities posted per teacher in a period
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import func, select

from eduopps.db.database import execute_raw_sql, get_db_session
from eduopps.db.schema import opportunities, user_roles, users
from eduopps.services.interest_service import get_interest_counts

PERIOD_DAYS = {"week": 7, "month": 30}


def opportunity_report(now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()

    by_industry = execute_raw_sql("""
        SELECT industry, COUNT(*) AS count
        FROM opportunities
        GROUP BY industry
        ORDER BY count DESC, industry
    """)

    with get_db_session() as db:
        total = db.execute(select(func.count(opportunities.c.id))).scalar()
        active = db.execute(
            select(func.count(opportunities.c.id)).where(opportunities.c.end_date >= now)
        ).scalar()
        # age_group is a JSON list, count each group separately
        age_lists = db.execute(select(opportunities.c.age_group)).scalars().all()

    age_counts = Counter(group for groups in age_lists for group in (groups or []))
    by_age_group = [
        {"age_group": group, "count": count}
        for group, count in sorted(age_counts.items(), key=lambda item: (-item[1], item[0]))
    ]

    return {
        "total_opportunities": total,
        "by_industry": by_industry,
        "by_age_group": by_age_group,
        "active_opportunities": active,
        "expired_opportunities": total - active,
    }


def interest_counts() -> Dict[int, int]:
    return get_interest_counts()


def teacher_activity(period: Optional[str] = None, now: Optional[datetime] = None) -> dict:
    """
    Opportunities created per teacher. `period` is "week" or "month";
    anything else covers all time.
    """
    now = now or datetime.utcnow()
    query = (
        select(
            users.c.id.label("teacher_id"),
            users.c.first_name.label("teacher_first_name"),
            users.c.last_name.label("teacher_last_name"),
            func.count(opportunities.c.id).label("count"),
        )
        .select_from(
            opportunities
            .join(users, users.c.id == opportunities.c.created_by_id)
            .join(user_roles, user_roles.c.id == users.c.role_id)
        )
        .where(user_roles.c.name == "teacher")
        .group_by(users.c.id, users.c.first_name, users.c.last_name)
        .order_by(func.count(opportunities.c.id).desc(), users.c.id)
    )
    days = PERIOD_DAYS.get(period or "")
    if days:
        query = query.where(opportunities.c.created_at >= now - timedelta(days=days))

    with get_db_session() as db:
        rows = [dict(r._mapping) for r in db.execute(query).fetchall()]

    return {
        "period": period if days else "all",
        "active_teachers": len(rows),
        "teacher_activity": rows,
    }
