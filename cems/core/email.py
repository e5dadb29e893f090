# cems/core/email.py
"""
Email service using Resend for sending transactional emails.
"""
import html
import logging
import os
from typing import List, Optional

import resend

from cems.core.config import settings

logger = logging.getLogger(__name__)


def init_resend():
    """Initialize Resend with API key."""
    resend.api_key = settings.RESEND_API_KEY


def is_configured() -> bool:
    return bool(settings.RESEND_API_KEY)


def _attachment(path: str) -> dict:
    with open(path, "rb") as fh:
        return {"filename": os.path.basename(path), "content": list(fh.read())}


def send_registration_pass(
    to_email: str,
    recipient_name: str,
    event_title: str,
    event_when: str,
    venue_name: Optional[str] = None,
    attachment_paths: Optional[List[str]] = None,
) -> dict:
    """
    Send the registration pass with the QR image and PDF attached.

    Args:
        to_email: Recipient email address
        recipient_name: Name of the recipient
        event_title: Title of the event
        event_when: Human readable date and time window
        venue_name: Optional venue name
        attachment_paths: Files to attach; missing files are skipped

    Returns:
        {"success": bool, "id" | "error": ...}
    """
    init_resend()

    name = html.escape(recipient_name or "")
    title = html.escape(event_title)
    when = html.escape(event_when)

    venue_html = f"<p><strong>Venue:</strong> {html.escape(venue_name)}</p>" if venue_name else ""

    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #1f4e79; color: white; padding: 24px; text-align: center; border-radius: 8px 8px 0 0; }}
            .content {{ background: #f9f9f9; padding: 24px; border-radius: 0 0 8px 8px; }}
            .details {{ background: white; padding: 15px; border-radius: 8px; margin: 15px 0; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Your Registration Pass</h1>
            </div>
            <div class="content">
                <p>Hi {name},</p>
                <p>You are registered for <strong>{title}</strong>.
                   Your pass is attached. Show the QR code at the entrance.</p>
                <div class="details">
                    <p><strong>When:</strong> {when}</p>
                    {venue_html}
                </div>
            </div>
        </div>
    </body>
    </html>
    """

    attachments = [
        _attachment(path) for path in (attachment_paths or []) if path and os.path.exists(path)
    ]

    params = {
        "from": f"{settings.EMAIL_FROM_NAME} <noreply@{settings.RESEND_FROM_DOMAIN}>",
        "to": [to_email],
        "subject": f"Registration Pass: {event_title}",
        "html": html_content,
    }
    if attachments:
        params["attachments"] = attachments

    try:
        response = resend.Emails.send(params)
        logger.info(f"Registration pass sent to {to_email} for event: {event_title}")
        return {"success": True, "id": response.get("id")}
    except Exception as e:
        logger.error(f"Failed to send pass email to {to_email}: {e}", exc_info=True)
        return {"success": False, "error": str(e)}

