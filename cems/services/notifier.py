# cems/services/notifier.py
"""
In-app notifications and outbound pass email.

In-app notifications are staged on the caller's session so they commit
(or roll back) together with the change that triggered them. Email is
best-effort: it is never allowed to fail the operation that sent it.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from cems.constants.settings_keys import EMAIL_NOTIFICATIONS_ENABLED
from cems.constants.status import NotificationType
from cems.core import email as email_service
from cems.crud import crud_notification, crud_user
from cems.services.pass_generator import PassArtifacts
from cems.services.settings_provider import SettingsProvider, settings_provider

logger = logging.getLogger(__name__)


class Notifier:
    def __init__(self, settings: Optional[SettingsProvider] = None):
        self.settings = settings or settings_provider

    def notify(
        self,
        db: Session,
        user_ids: Iterable[str],
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
    ) -> List:
        user_ids = [uid for uid in dict.fromkeys(user_ids) if uid]
        if not user_ids:
            return []
        return crud_notification.notification.add_many(
            db, user_ids=user_ids, title=title, message=message, type=type.value
        )

    def notify_role(
        self,
        db: Session,
        role: Optional[str],
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
    ) -> int:
        """Fans out to every active user of a role, or to everyone when role is None or 'all'."""
        target = None if role in (None, "all") else role
        user_ids = crud_user.user.get_active_ids(db, role=target)
        self.notify(db, user_ids, title, message, type)
        return len(user_ids)

    def send_pass_email(self, db: Session, user, event, artifacts: PassArtifacts) -> bool:
        if not user.email:
            return False
        try:
            return self._send_pass_email(db, user, event, artifacts)
        except Exception as e:
            logger.error(f"Pass email to {user.email} failed: {e}", exc_info=True)
            return False

    def _send_pass_email(self, db: Session, user, event, artifacts: PassArtifacts) -> bool:
        if not self.settings.get_bool(db, EMAIL_NOTIFICATIONS_ENABLED, default=True):
            logger.debug("Email notifications disabled; pass email skipped")
            return False
        if not email_service.is_configured():
            logger.debug("Resend is not configured; pass email skipped")
            return False

        venue = getattr(event, "venue", None)
        when = (
            f"{event.event_date.isoformat()} "
            f"{event.start_time.strftime('%H:%M')}-{event.end_time.strftime('%H:%M')}"
        )
        result = email_service.send_registration_pass(
            to_email=user.email,
            recipient_name=user.first_name,
            event_title=event.title,
            event_when=when,
            venue_name=venue.name if venue is not None else None,
            attachment_paths=artifacts.attachment_paths,
        )
        return result.get("success", False)


notifier = Notifier()
