"""
Email Service - outgoing mail over SMTP.

Used by form requests:
1. send_application_forms_email() - signed links to the application forms, to the student
2. send_form_request_notification() - heads-up to the opportunity creator

Sending is skipped (and reported as not sent) when SMTP_HOST is empty.
Failures are logged and returned as False; callers never fail on mail.
"""

import smtplib
from datetime import datetime
from email.message import EmailMessage
from html import escape
from typing import List

from loguru import logger

from eduopps.core.config import get_settings


def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """Send one HTML e-mail. Returns True when the SMTP server accepted it."""
    settings = get_settings()
    if not settings.smtp_enabled:
        logger.warning(f"SMTP not configured, skipping e-mail to {to_email}: {subject}")
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from or settings.smtp_user
    msg["To"] = to_email.strip().lower()
    msg.set_content("This message requires an HTML-capable mail client.")
    msg.add_alternative(html_body, subtype="html")

    try:
        if settings.smtp_port == 465:
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
                if settings.smtp_user:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout_seconds) as server:
                if settings.smtp_use_tls:
                    server.starttls()
                if settings.smtp_user:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
    except smtplib.SMTPAuthenticationError:
        logger.exception(f"SMTP auth failed for {settings.smtp_user}")
        return False
    except smtplib.SMTPException:
        logger.exception(f"SMTP error while sending e-mail to {to_email}")
        return False
    except OSError:
        # Includes connection timeouts
        logger.exception(f"SMTP network error while sending e-mail to {to_email}")
        return False

    logger.info(f"E-mail sent to {to_email}: {subject}")
    return True


def send_application_forms_email(
    student_email: str,
    student_name: str,
    opportunity_title: str,
    links: List[dict]
) -> bool:
    """
    Args:
        links: [{"name": ..., "url": ...}] signed download links
    """
    days = get_settings().emailed_link_days
    items = "".join(
        f'<li style="margin: 10px 0;"><a href="{escape(link["url"])}">{escape(link["name"])}</a></li>'
        for link in links
    )
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Application Forms for {escape(opportunity_title)}</h2>
      <p>Dear {escape(student_name)},</p>
      <p>Thank you for your interest in <strong>{escape(opportunity_title)}</strong>.
         Please download the application forms below:</p>
      <ul>{items}</ul>
      <p><strong>Important:</strong> These download links will expire in {days} days.</p>
      <p>If you have any questions about the application process, please contact your
         teacher or school administration.</p>
      <p>Best regards,<br>Career Opportunities Team</p>
    </div>
    """
    return send_email(student_email, f"Application Forms - {opportunity_title}", html)


def send_form_request_notification(
    teacher_email: str,
    teacher_name: str,
    student_name: str,
    student_email: str,
    opportunity_title: str
) -> bool:
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2>Application Form Request</h2>
      <p>Dear {escape(teacher_name)},</p>
      <p>A student has requested application forms for one of your opportunities:</p>
      <p><strong>Student:</strong> {escape(student_name)} ({escape(student_email)})</p>
      <p><strong>Opportunity:</strong> {escape(opportunity_title)}</p>
      <p><strong>Request Time:</strong> {datetime.utcnow():%Y-%m-%d %H:%M} UTC</p>
      <p>The application forms have been sent to the student's e-mail address.</p>
    </div>
    """
    return send_email(teacher_email, f"Application Form Request - {opportunity_title}", html)
