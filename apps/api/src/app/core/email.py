"""
Email Service using Resend

Student notifications for the chapter membership workflow. Sending is
best-effort: callers log failures and carry on.
"""

import asyncio
import logging
from html import escape

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

_BASE_STYLE = """
    body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
    .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
    .header { color: #4338ca; margin-bottom: 24px; }
    .banner { padding: 16px; border-radius: 8px; margin: 16px 0; }
    .approved { background-color: #d1fae5; border: 1px solid #22c55e; }
    .rejected { background-color: #fee2e2; border: 1px solid #ef4444; }
    .notes { background-color: #f9fafb; border-left: 4px solid #6b7280; padding: 12px 16px; margin: 16px 0; }
    .button { display: inline-block; background-color: #4338ca; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
"""


def _wrap(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head><style>{_BASE_STYLE}</style></head>
    <body>
        <div class="container">
            <h1 class="header">{title}</h1>
            {body}
            <div class="footer">
                <p>Unify - Student Chapter Membership</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    When RESEND_API_KEY is not configured the email is logged instead.

    Returns:
        True if the email was sent (or logged), False on failure
    """
    if not settings.resend_api_key:
        logger.info(f"RESEND_API_KEY not set - EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    resend.api_key = settings.resend_api_key
    params: resend.Emails.SendParams = {
        "from": settings.email_from,
        "to": [to_email],
        "subject": subject,
        "html": html_content,
    }

    try:
        # Resend's client is synchronous
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


async def send_registration_decision(
    to_email: str,
    student_name: str,
    chapter_name: str,
    approved: bool,
    notes: str | None = None,
) -> bool:
    """Tell a student their registration request was approved or rejected."""
    safe_student_name = escape(student_name)
    safe_chapter_name = escape(chapter_name)

    if approved:
        banner = (
            f'<div class="banner approved">You are now a member of '
            f"<strong>{safe_chapter_name}</strong>.</div>"
        )
        subject = f"Welcome to {safe_chapter_name}"
    else:
        banner = (
            f'<div class="banner rejected">Your request to join '
            f"<strong>{safe_chapter_name}</strong> was not approved.</div>"
        )
        subject = f"Your {safe_chapter_name} registration"

    notes_html = f'<div class="notes">{escape(notes)}</div>' if notes else ""
    body = f"""
        <p>Hello {safe_student_name},</p>
        {banner}
        {notes_html}
        <a href="{settings.frontend_url}/student" class="button">Open Unify</a>
    """
    return await send_email(
        to_email=to_email,
        subject=subject,
        html_content=_wrap("Registration update", body),
    )


async def send_removed_from_chapter(
    to_email: str,
    student_name: str,
    chapter_name: str,
    reason: str,
) -> bool:
    """Tell a student they were removed from a chapter by its head."""
    body = f"""
        <p>Hello {escape(student_name)},</p>
        <div class="banner rejected">You have been removed from
        <strong>{escape(chapter_name)}</strong> by the chapter head.</div>
        <div class="notes">{escape(reason)}</div>
        <p>You can apply again when the chapter's registration is open.</p>
    """
    return await send_email(
        to_email=to_email,
        subject=f"You were removed from {escape(chapter_name)}",
        html_content=_wrap("Membership update", body),
    )
