"""
Form Request Service - students asking for an opportunity's application forms.

FLOW:
1. Record the request (one per student per opportunity)
2. Find documents whose names contain "application" or "form"
3. E-mail the student signed download links (valid EMAILED_LINK_DAYS)
4. When that e-mail goes out, mark the request sent and notify the creator

Mail problems are logged; the request itself is always kept.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from loguru import logger
from sqlalchemy import insert, select, update

from eduopps.core.config import get_settings
from eduopps.db.database import get_db_session, row_to_dict
from eduopps.db.schema import form_requests
from eduopps.services import document_service, email_service, user_service


class DuplicateFormRequestError(Exception):
    """The student already requested forms for this opportunity."""


def get_form_request_by_id(request_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(select(form_requests).where(form_requests.c.id == request_id)).fetchone()
    return row_to_dict(row)


def get_student_request(student_id: int, opportunity_id: int) -> Optional[dict]:
    with get_db_session() as db:
        row = db.execute(
            select(form_requests).where(
                form_requests.c.student_id == student_id,
                form_requests.c.opportunity_id == opportunity_id,
            )
        ).fetchone()
    return row_to_dict(row)


def get_requests_by_student(student_id: int) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            select(form_requests)
            .where(form_requests.c.student_id == student_id)
            .order_by(form_requests.c.request_date.desc(), form_requests.c.id.desc())
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def get_requests_by_opportunity(opportunity_id: int) -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(
            select(form_requests)
            .where(form_requests.c.opportunity_id == opportunity_id)
            .order_by(form_requests.c.request_date.desc(), form_requests.c.id.desc())
        ).fetchall()
    return [row_to_dict(r) for r in rows]


def mark_email_sent(request_id: int) -> Optional[dict]:
    with get_db_session() as db:
        db.execute(
            update(form_requests)
            .where(form_requests.c.id == request_id)
            .values(email_sent=True, email_sent_date=datetime.utcnow(), fulfilled=True)
        )
    return get_form_request_by_id(request_id)


def create_form_request(student: dict, opportunity: dict) -> dict:
    """
    Record a request and e-mail the forms.

    Returns:
        The request row plus `documents_found` and a user-facing `message`.
    Raises:
        DuplicateFormRequestError when the student already asked.
    """
    if get_student_request(student["id"], opportunity["id"]):
        raise DuplicateFormRequestError(
            "You have already requested application forms for this opportunity"
        )

    with get_db_session() as db:
        result = db.execute(insert(form_requests).values(
            student_id=student["id"],
            opportunity_id=opportunity["id"],
        ))
        request_id = result.inserted_primary_key[0]

    forms = document_service.get_form_documents(opportunity["id"])
    if forms and _send_forms(student, opportunity, forms):
        mark_email_sent(request_id)
        _notify_creator(student, opportunity)

    response = get_form_request_by_id(request_id)
    response["documents_found"] = len(forms)
    response["message"] = (
        "Application forms have been sent to your email address"
        if forms else
        "Form request created successfully, but no application forms are currently available"
    )
    logger.info(
        f"Form request {request_id}: student {student['id']}, "
        f"opportunity {opportunity['id']}, {len(forms)} forms"
    )
    return response


def _send_forms(student: dict, opportunity: dict, forms: List[dict]) -> bool:
    expires = timedelta(days=get_settings().emailed_link_days)
    links = [
        {"name": doc["name"], "url": document_service.build_download_url(doc, expires)}
        for doc in forms
        if doc.get("object_name")
    ]
    if not links:
        logger.warning(f"No stored application forms to send for opportunity {opportunity['id']}")
        return False

    return email_service.send_application_forms_email(
        student["email"],
        f"{student['first_name']} {student['last_name']}",
        opportunity["title"],
        links,
    )


def _notify_creator(student: dict, opportunity: dict) -> None:
    if not opportunity.get("created_by_id"):
        return
    creator = user_service.get_user_by_id(opportunity["created_by_id"])
    if creator:
        email_service.send_form_request_notification(
            creator["email"],
            creator["first_name"],
            f"{student['first_name']} {student['last_name']}",
            student["email"],
            opportunity["title"],
        )
