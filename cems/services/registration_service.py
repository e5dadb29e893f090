# cems/services/registration_service.py
"""
Event registration workflow.

register
    Locks the event row, runs the guards (availability, deadline, capacity,
    duplicate, registrations open, per-student limit), inserts the
    registration with a signed ticket token and commits it together with the
    confirmation notification. The pass (QR + PDF) and the email are produced
    after the commit; their failures are logged and never undo a registration.

unregister
    Hard-deletes the registration while the event has not started.

mark_attendance / check_in
    Organizer or admin records attended/absent, either by registration id or
    by scanning the pass token.

submit_feedback
    Once per registration, only after attendance was recorded.

Time is read from an injectable clock (naive local time, matching the
naive DATE/TIME/DATETIME columns) so guards can be tested at exact instants.
"""

import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cems.constants.settings_keys import (
    ALLOW_EVENT_SELF_REGISTRATION,
    MAX_REGISTRATION_PER_STUDENT,
)
from cems.constants.status import (
    AttendanceStatus,
    EventStatus,
    NotificationType,
    RegistrationStatus,
)
from cems.core.exceptions import (
    AlreadyRegisteredError,
    AlreadyStartedError,
    AlreadySubmittedError,
    AppError,
    ConflictError,
    DeadlineExpiredError,
    EventFullError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    RegistrationClosedError,
    RegistrationLimitError,
    ValidationFailedError,
)
from cems.core.permissions import can_manage_event
from cems.crud import crud_event, crud_registration, crud_user
from cems.schemas.common import page_offset
from cems.schemas.token import TokenPayload
from cems.services.notifier import Notifier, notifier as default_notifier
from cems.services.pass_generator import (
    PassArtifacts,
    PassGenerator,
    pass_generator as default_pass_generator,
)
from cems.services.settings_provider import (
    SettingsProvider,
    settings_provider as default_settings_provider,
)

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        pass_generator: Optional[PassGenerator] = None,
        settings: Optional[SettingsProvider] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.notifier = notifier or default_notifier
        self.pass_generator = pass_generator or default_pass_generator
        self.settings = settings or default_settings_provider
        self.clock = clock

    # ------------------------------------------------------------------
    # register
    # ------------------------------------------------------------------

    def register(
        self, db: Session, event_id: str, student_id: str, now: Optional[datetime] = None
    ) -> dict:
        now = now or self.clock()

        try:
            event, student, max_allowed = self._check_can_register(
                db, event_id, student_id, now
            )
            registration = self._insert(db, event, student_id, now)

            # Backstop for a registration on another event committed between
            # the limit check and our insert.
            if max_allowed > 0:
                total = crud_registration.registration.count_by_student(
                    db, student_id=student_id
                )
                if total > max_allowed:
                    raise RegistrationLimitError(max_allowed)

            self.notifier.notify(
                db,
                [student_id],
                "Event Registration Confirmed",
                f'You have successfully registered for "{event.title}"',
                NotificationType.success,
            )
            db.commit()
        except AppError as e:
            db.rollback()
            logger.info(
                f"Registration rejected for student {student_id} on event {event_id}: {e.code}"
            )
            raise

        logger.info(
            f"Registration {registration.id} created for student {student_id} on event {event_id}"
        )

        artifacts = self.pass_generator.render(registration, event, student)
        self.notifier.send_pass_email(db, student, event, artifacts)
        return self._pass_payload(registration, event, student, artifacts)

    def _check_can_register(self, db: Session, event_id: str, student_id: str, now: datetime):
        event = crud_event.event.get_for_update(db, id=event_id)
        if not event or event.status not in EventStatus.open_for_registration():
            raise NotFoundError("Event not found or not available for registration")

        if event.registration_deadline and now > event.registration_deadline:
            raise DeadlineExpiredError()

        registered = crud_registration.registration.count_by_event(db, event_id=event_id)
        if registered >= event.capacity:
            raise EventFullError()

        existing = crud_registration.registration.get_by_event_and_student(
            db, event_id=event_id, student_id=student_id
        )
        if existing:
            raise AlreadyRegisteredError()

        student = crud_user.user.get(db, id=student_id)
        if not student or not student.is_active:
            raise NotFoundError("Student account not found")

        if not self.settings.get_bool(db, ALLOW_EVENT_SELF_REGISTRATION, default=True):
            raise RegistrationClosedError()

        max_allowed = self.settings.get_int(db, MAX_REGISTRATION_PER_STUDENT, default=0)
        if max_allowed > 0:
            current = crud_registration.registration.count_by_student(
                db, student_id=student_id
            )
            if current >= max_allowed:
                raise RegistrationLimitError(max_allowed)

        return event, student, max_allowed

    def _insert(self, db: Session, event, student_id: str, now: datetime):
        token = self.pass_generator.issue_token(event.id, student_id)
        try:
            return crud_registration.registration.add_pending(
                db,
                event_id=event.id,
                student_id=student_id,
                qr_code=token,
                registration_date=now,
            )
        except IntegrityError:
            # A concurrent request for the same (event, student) won the insert
            db.rollback()
            if crud_registration.registration.get_by_event_and_student(
                db, event_id=event.id, student_id=student_id
            ):
                raise AlreadyRegisteredError()
            raise

    # ------------------------------------------------------------------
    # unregister
    # ------------------------------------------------------------------

    def unregister(
        self, db: Session, event_id: str, student_id: str, now: Optional[datetime] = None
    ) -> None:
        now = now or self.clock()

        registration = crud_registration.registration.get_by_event_and_student(
            db, event_id=event_id, student_id=student_id
        )
        if not registration:
            raise NotFoundError("You are not registered for this event")

        event = registration.event
        if now >= event.starts_at:
            raise AlreadyStartedError()

        db.delete(registration)
        db.commit()
        logger.info(f"Student {student_id} unregistered from event {event_id}")

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def list_my_registrations(
        self,
        db: Session,
        student_id: str,
        status_filter: str = "all",
        page: int = 1,
        limit: int = 10,
        today: Optional[date] = None,
    ) -> Tuple[List[dict], int]:
        today = today or self.clock().date()
        return crud_registration.registration.get_multi_by_student(
            db,
            student_id=student_id,
            today=today,
            status_filter=status_filter,
            skip=page_offset(page, limit),
            limit=limit,
        )

    def get_or_issue_pass(self, db: Session, event_id: str, student_id: str) -> dict:
        registration = crud_registration.registration.get_by_event_and_student(
            db, event_id=event_id, student_id=student_id
        )
        if not registration:
            raise NotFoundError("Registration not found")

        event = crud_event.event.get(db, id=event_id)
        if not event:
            raise NotFoundError("Event not found")

        student = crud_user.user.get(db, id=student_id)
        if not student:
            raise NotFoundError("Student account not found")

        artifacts = self.pass_generator.render(registration, event, student)
        return self._pass_payload(registration, event, student, artifacts)

    def list_event_registrations(
        self,
        db: Session,
        event_id: str,
        requester: TokenPayload,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[dict], int]:
        event = crud_event.event.get(db, id=event_id)
        if not event:
            raise NotFoundError("Event not found")
        if not can_manage_event(requester, event):
            raise ForbiddenError("You can only view registrations for your own events")

        return crud_registration.registration.get_multi_by_event(
            db, event_id=event_id, skip=page_offset(page, limit), limit=limit
        )

    # ------------------------------------------------------------------
    # attendance
    # ------------------------------------------------------------------

    def mark_attendance(
        self,
        db: Session,
        registration_id: str,
        status: str,
        requester: TokenPayload,
        now: Optional[datetime] = None,
    ):
        now = now or self.clock()
        status = AttendanceStatus(status).value

        registration = crud_registration.registration.get(db, id=registration_id)
        if not registration:
            raise NotFoundError("Registration not found")
        if not can_manage_event(requester, registration.event):
            raise ForbiddenError("You can only mark attendance for your own events")

        if (
            status == AttendanceStatus.absent.value
            and registration.feedback_rating is not None
        ):
            raise InvalidStateError("Cannot mark absent after feedback was submitted")

        self._record_attendance(db, registration, status, requester, now)
        return registration

    def check_in(
        self,
        db: Session,
        token: str,
        requester: TokenPayload,
        now: Optional[datetime] = None,
    ):
        """Marks the holder of a scanned pass as attended."""
        now = now or self.clock()

        claims = self.pass_generator.verify_token(token)
        if claims is None:
            raise ValidationFailedError(
                "Invalid pass",
                errors=[{"field": "token", "message": "Signature or format is invalid"}],
            )

        registration = crud_registration.registration.get_by_event_and_student(
            db, event_id=claims["eid"], student_id=claims["sub"]
        )
        if not registration:
            raise NotFoundError("Registration not found for this pass")
        if registration.qr_code != token:
            raise InvalidStateError("This pass does not match the registration on record")
        if not can_manage_event(requester, registration.event):
            raise ForbiddenError("You can only check in attendees of your own events")
        if registration.status == RegistrationStatus.attended.value:
            raise ConflictError("Attendance already marked")

        self._record_attendance(
            db, registration, AttendanceStatus.attended.value, requester, now
        )
        return registration

    def _record_attendance(self, db: Session, registration, status: str, requester, now):
        registration.status = status
        registration.attendance_marked_at = now
        registration.attendance_marked_by = requester.sub
        db.add(registration)
        db.commit()
        db.refresh(registration)
        logger.info(
            f"Attendance for registration {registration.id} marked {status} by {requester.sub}"
        )

    # ------------------------------------------------------------------
    # feedback
    # ------------------------------------------------------------------

    def submit_feedback(
        self,
        db: Session,
        event_id: str,
        student_id: str,
        rating: int,
        text: Optional[str] = None,
        now: Optional[datetime] = None,
    ):
        now = now or self.clock()

        registration = crud_registration.registration.get_by_event_and_student(
            db, event_id=event_id, student_id=student_id
        )
        if not registration:
            raise NotFoundError("Registration not found")
        if registration.status != RegistrationStatus.attended.value:
            raise InvalidStateError("You can only submit feedback for events you attended")
        if registration.feedback_rating is not None:
            raise AlreadySubmittedError()

        recorded = crud_registration.registration.set_feedback_once(
            db,
            registration_id=registration.id,
            rating=rating,
            text=text or None,
            submitted_at=now,
        )
        if not recorded:
            db.rollback()
            raise AlreadySubmittedError()

        db.commit()
        db.refresh(registration)
        logger.info(f"Feedback ({rating}) recorded for registration {registration.id}")
        return registration

    # ------------------------------------------------------------------

    @staticmethod
    def _pass_payload(registration, event, student, artifacts: PassArtifacts) -> dict:
        venue = event.venue
        return {
            "registrationId": registration.id,
            "event": {
                "id": event.id,
                "title": event.title,
                "date": event.event_date,
                "startTime": event.start_time,
                "endTime": event.end_time,
                "venue": venue.name if venue is not None else None,
                "location": venue.location if venue is not None else None,
            },
            "user": {
                "id": student.id,
                "firstName": student.first_name,
                "lastName": student.last_name,
                "email": student.email,
                "studentId": student.student_id,
            },
            "qrImage": artifacts.qr_image,
            "qrFileUrl": artifacts.qr_file_url,
            "pdfFileUrl": artifacts.pdf_file_url,
        }


registration_service = RegistrationService()
