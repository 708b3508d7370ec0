"""
Student interest (registration) service.

A student registers interest in an opportunity at most once
(uq_student_interest). Capacity is enforced against number_of_spaces
when the opportunity sets it.
"""

import csv
import io
import re
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError

from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import opportunities, schools, student_interests, users


class CapacityReachedError(Exception):
    """Raised when an opportunity has no spaces left."""


CSV_HEADER = ["Name", "Email", "Username", "School", "Registration Date"]


def get_interest(student_id: int, opportunity_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            select(student_interests).where(
                student_interests.c.student_id == student_id,
                student_interests.c.opportunity_id == opportunity_id,
            )
        ).fetchone()
    return row_to_dict(row)


def register_interest(student_id: int, opportunity: dict, notes: Optional[str] = None) -> dict:
    """
    Register a student for an opportunity.

    Idempotent: an existing registration is returned unchanged.
    Raises CapacityReachedError when all spaces are taken.
    """
    existing = get_interest(student_id, opportunity["id"])
    if existing:
        return existing

    try:
        with get_db_session() as db:
            if opportunity.get("number_of_spaces"):
                taken = db.execute(
                    select(func.count(student_interests.c.id))
                    .where(student_interests.c.opportunity_id == opportunity["id"])
                ).scalar()
                if taken >= opportunity["number_of_spaces"]:
                    raise CapacityReachedError("No spaces left")

            result = db.execute(insert(student_interests).values(
                student_id=student_id,
                opportunity_id=opportunity["id"],
                notes=notes,
            ))
            interest_id = result.inserted_primary_key[0]
            row = db.execute(select(student_interests).where(student_interests.c.id == interest_id)).fetchone()
    except IntegrityError:
        # A concurrent request registered the same student first
        existing = get_interest(student_id, opportunity["id"])
        if existing is None:
            raise
        return existing

    logger.info(f"Student {student_id} registered for opportunity {opportunity['id']}")
    return row_to_dict(row)


def remove_interest(student_id: int, opportunity_id: int) -> bool:
    with get_db_session() as db:
        result = db.execute(
            delete(student_interests).where(
                student_interests.c.student_id == student_id,
                student_interests.c.opportunity_id == opportunity_id,
            )
        )
        return result.rowcount > 0


def get_student_interests(student_id: int) -> List[dict]:
    """A student's registrations with the opportunity attached, newest first."""
    with get_db_session() as db:
        rows = db.execute(
            select(student_interests, opportunities.c.title, opportunities.c.organization,
                   opportunities.c.start_date, opportunities.c.application_deadline)
            .select_from(student_interests.join(opportunities))
            .where(student_interests.c.student_id == student_id)
            .order_by(student_interests.c.registration_date.desc(), student_interests.c.id.desc())
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def get_registered_opportunity_ids(student_id: int) -> set:
    with get_db_session() as db:
        rows = db.execute(
            select(student_interests.c.opportunity_id).where(student_interests.c.student_id == student_id)
        ).fetchall()
    return {r[0] for r in rows}


def get_attendees(opportunity_id: int) -> List[dict]:
    """Registered students with their school and registration date."""
    with get_db_session() as db:
        rows = db.execute(
            select(
                users.c.id,
                users.c.email,
                users.c.username,
                users.c.first_name,
                users.c.last_name,
                users.c.school_id,
                schools.c.name.label("school_name"),
                schools.c.logo_url.label("school_logo_url"),
                student_interests.c.registration_date,
                student_interests.c.status,
            )
            .select_from(
                student_interests
                .join(users, users.c.id == student_interests.c.student_id)
                .outerjoin(schools, schools.c.id == users.c.school_id)
            )
            .where(student_interests.c.opportunity_id == opportunity_id)
            .order_by(student_interests.c.registration_date, student_interests.c.id)
        ).fetchall()

    attendees = []
    for row in rows:
        attendee = row_to_dict(row)
        school_name = attendee.pop("school_name")
        logo_url = attendee.pop("school_logo_url")
        attendee["school"] = (
            {"id": attendee["school_id"], "name": school_name, "logo_url": logo_url}
            if attendee["school_id"] else None
        )
        attendees.append(attendee)
    return attendees


def get_interest_counts() -> Dict[int, int]:
    """Opportunity id -> number of registrations."""
    with get_db_session() as db:
        rows = db.execute(
            select(student_interests.c.opportunity_id, func.count(student_interests.c.id))
            .group_by(student_interests.c.opportunity_id)
        ).fetchall()
    return {opportunity_id: count for opportunity_id, count in rows}


def attendees_csv_filename(title: str) -> str:
    return f"attendees-for-{re.sub(r'[^a-zA-Z0-9]', '_', title)}.csv"


def build_attendees_csv(attendees: List[dict]) -> str:
    """Attendee list as CSV text (header row first)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for attendee in attendees:
        registered = attendee.get("registration_date")
        writer.writerow([
            f"{attendee['first_name']} {attendee['last_name']}",
            attendee["email"],
            attendee["username"],
            (attendee.get("school") or {}).get("name", ""),
            registered.strftime("%Y-%m-%d") if registered else "",
        ])
    return buffer.getvalue()
