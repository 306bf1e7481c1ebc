"""
Application Service
Visa application lifecycle for a booking's main applicant and its dependants.

Status flow: pending -> submitted -> under_review -> accepted | rejected.
Applicants move pending -> submitted by submitting the form; every other move
is an admin review. Accepted and rejected applications are locked, and a
booking whose application process is closed locks every application under it
for non-admin callers.
"""

import logging
import random
from datetime import date, datetime, timezone
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta
from flask import current_app

from app.extensions import db
from app.models.application import APPLICATION_FORM_FIELDS
from app.models.enums import ApplicationStatus
from app.services.access import (
    ensure_admin, ensure_booking_access, ensure_dependant_access, find_user_email
)
from app.services.errors import ProcessClosed, TerminalStateViolation, ValidationFailed
from app.services.notification import create_notification_service
from app.services.records import load_booking, load_dependant

logger = logging.getLogger(__name__)

PASSPORT_VALIDITY_MESSAGE = (
    'Passport must be valid at least {months} months from the visa application submission date'
)
CLOSED_MESSAGE = 'Application process has been closed. Cannot modify application.'
REVIEWED_MESSAGE = 'Application has already been reviewed. Cannot modify.'


def generate_application_number(now: Optional[datetime] = None) -> str:
    """YYMMDD followed by six random digits"""
    now = now or datetime.now(timezone.utc)
    return f"{now:%y%m%d}{random.randint(100000, 999999)}"


def _utcnow():
    return datetime.now(timezone.utc)


def _serialize(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class ApplicationService:
    """Submit, patch, review and close visa applications"""

    def __init__(self, notifier=None, user_lookup=find_user_email, min_validity_months=6):
        self.notifier = notifier
        self.user_lookup = user_lookup
        self.min_validity_months = min_validity_months

    # ----- Rules -----

    def validate_passport_expiry(self, expiry: Optional[date], now: datetime):
        """The passport must stay valid for the minimum period after submission"""
        if expiry is None:
            return
        earliest = now.date() + relativedelta(months=self.min_validity_months)
        if expiry < earliest:
            message = PASSPORT_VALIDITY_MESSAGE.format(months=self.min_validity_months)
            raise ValidationFailed(message, errors={'passportExpiryDate': message})

    def ensure_mutable(self, caller, booking, application):
        """Reject changes while the process is closed or once the application was reviewed"""
        if booking.application_closed and not caller.is_admin:
            raise ProcessClosed(CLOSED_MESSAGE)
        if application.is_application_locked:
            raise TerminalStateViolation(REVIEWED_MESSAGE)

    # ----- Shared transitions -----

    def _apply_submission(self, application, form_data: Dict, now: datetime) -> bool:
        """
        Replace the stored form with the submitted one.

        Returns True when this is the first submission, which is the only time
        the submitted flag, timestamp and status change.
        """
        self.validate_passport_expiry(form_data.get('passport_expiry_date'), now)

        existing = application.application_form_data or {}
        new_data = {
            field: _serialize(form_data[field])
            for field in APPLICATION_FORM_FIELDS
            if form_data.get(field) is not None
        }
        new_data['application_number'] = existing.get('application_number') or generate_application_number(now)
        application.application_form_data = new_data

        is_new_submission = not application.application_form_submitted
        if is_new_submission:
            application.application_form_submitted = True
            application.application_form_submitted_at = now
            application.application_status = ApplicationStatus.SUBMITTED
        return is_new_submission

    def _apply_patch(self, application, form_data: Dict):
        updated = dict(application.application_form_data or {})
        for field in APPLICATION_FORM_FIELDS:
            if field in form_data:
                value = _serialize(form_data[field])
                if value is None:
                    updated.pop(field, None)
                else:
                    updated[field] = value
        application.application_form_data = updated

    def _apply_review(self, caller, application, status, now):
        try:
            new_status = ApplicationStatus(status)
        except ValueError:
            valid = ', '.join(s.value for s in ApplicationStatus)
            raise ValidationFailed(f"Valid status is required. Must be one of: {valid}")

        application.application_status = new_status
        application.application_reviewed_at = now
        application.application_reviewed_by = caller.user_id
        return new_status

    @staticmethod
    def _sync_dependant_basics(dependant, form_data):
        # The roster columns mirror the passport details on the form
        if form_data.get('passport_number'):
            dependant.passport_number = form_data['passport_number']
        if form_data.get('date_of_birth'):
            dependant.date_of_birth = form_data['date_of_birth']

    def _notify(self, method, **kwargs):
        if not self.notifier:
            return
        try:
            getattr(self.notifier, method)(**kwargs)
        except Exception as e:
            logger.error(f"Notification {method} failed: {str(e)}")

    # ----- Main applicant -----

    def get_booking_application(self, caller, booking_id):
        booking = load_booking(booking_id)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)
        return booking

    def submit_booking_application(self, caller, booking_id, form_data: Dict, now: Optional[datetime] = None):
        now = now or _utcnow()
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)
        self.ensure_mutable(caller, booking, booking)

        is_new_submission = self._apply_submission(booking, form_data, now)
        db.session.commit()

        if is_new_submission:
            logger.info(f"Main applicant application submitted for booking {booking.id}")
            self._notify(
                'notify_admin_application',
                applicant_type='user',
                booking_id=booking.id,
                application_id=booking.id,
                name=booking.customer_name,
                email=booking.customer_email,
                tour_title=booking.tour.title if booking.tour else 'Unknown Tour'
            )
        return booking, is_new_submission

    def patch_booking_application(self, caller, booking_id, form_data: Dict):
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)
        self.ensure_mutable(caller, booking, booking)

        self._apply_patch(booking, form_data)
        db.session.commit()
        return booking

    # ----- Dependants -----

    def get_dependant_application(self, caller, dependant_id):
        dependant = load_dependant(dependant_id)
        ensure_dependant_access(caller, dependant)
        return dependant

    def submit_dependant_application(self, caller, dependant_id, form_data: Dict, now: Optional[datetime] = None):
        now = now or _utcnow()
        dependant = load_dependant(dependant_id)
        ensure_dependant_access(caller, dependant)
        booking = load_booking(dependant.booking_id, lock=True)
        self.ensure_mutable(caller, booking, dependant)

        is_new_submission = self._apply_submission(dependant, form_data, now)
        self._sync_dependant_basics(dependant, form_data)
        db.session.commit()

        if is_new_submission:
            logger.info(f"Dependant application submitted for {dependant.id} on booking {booking.id}")
            self._notify(
                'notify_admin_application',
                applicant_type='dependant',
                booking_id=booking.id,
                application_id=dependant.id,
                name=dependant.name,
                email=booking.customer_email,
                tour_title=booking.tour.title if booking.tour else 'Unknown Tour'
            )
        return dependant, is_new_submission

    def patch_dependant_application(self, caller, dependant_id, form_data: Dict):
        dependant = load_dependant(dependant_id)
        ensure_dependant_access(caller, dependant)
        booking = load_booking(dependant.booking_id, lock=True)
        self.ensure_mutable(caller, booking, dependant)

        self._apply_patch(dependant, form_data)
        self._sync_dependant_basics(dependant, form_data)
        db.session.commit()
        return dependant

    # ----- Admin -----

    def review_booking_application(self, caller, booking_id, status: str, now: Optional[datetime] = None):
        ensure_admin(caller)
        booking = load_booking(booking_id, lock=True)
        new_status = self._apply_review(caller, booking, status, now or _utcnow())
        db.session.commit()

        logger.info(f"Booking {booking.id} main application set to {new_status.value} by {caller.user_id}")
        self._notify(
            'notify_application_status',
            to_email=booking.customer_email,
            customer_name=booking.customer_name,
            applicant_type='user',
            applicant_name=booking.customer_name,
            status=new_status.value,
            tour_title=booking.tour.title if booking.tour else 'Unknown Tour',
            booking_id=booking.id
        )
        return booking

    def review_dependant_application(self, caller, dependant_id, status: str, now: Optional[datetime] = None):
        ensure_admin(caller)
        dependant = load_dependant(dependant_id, lock=True)
        new_status = self._apply_review(caller, dependant, status, now or _utcnow())
        db.session.commit()

        logger.info(f"Dependant {dependant.id} application set to {new_status.value} by {caller.user_id}")
        booking = dependant.booking
        if booking:
            self._notify(
                'notify_application_status',
                to_email=booking.customer_email,
                customer_name=booking.customer_name,
                applicant_type='dependant',
                applicant_name=dependant.name,
                status=new_status.value,
                tour_title=booking.tour.title if booking.tour else 'Unknown Tour',
                booking_id=booking.id
            )
        return dependant

    def set_application_closed(self, caller, booking_id, action: str, now: Optional[datetime] = None):
        """Close or reopen the application process for a whole booking"""
        ensure_admin(caller)
        booking = load_booking(booking_id, lock=True)

        if action == 'close':
            booking.application_closed = True
            booking.application_closed_at = now or _utcnow()
            booking.application_closed_by = caller.user_id
        elif action == 'reopen':
            booking.application_closed = False
            booking.application_closed_at = None
            booking.application_closed_by = None
        else:
            raise ValidationFailed('Invalid action. Use "close" or "reopen"')

        db.session.commit()
        state = 'closed' if booking.application_closed else 'reopened'
        logger.info(f"Application process for booking {booking.id} {state} by {caller.user_id}")
        return booking


def create_application_service():
    return ApplicationService(
        notifier=create_notification_service(),
        min_validity_months=current_app.config.get('PASSPORT_MIN_VALIDITY_MONTHS', 6)
    )
