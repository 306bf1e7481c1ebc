"""
Dependant roster for a booking.

A booking covers `number_of_travelers` people: the main applicant plus its
dependants. The booking row is locked while a dependant is added, so two
concurrent adds cannot both claim the last free place.
"""

import logging
from typing import Dict, Optional

from app.extensions import db
from app.models import Dependant
from app.models.application import APPLICATION_FORM_FIELDS
from app.services.access import ensure_booking_access, ensure_dependant_access, find_user_email, find_user_id_by_email
from app.services.documents import DocumentSlotManager
from app.services.errors import Forbidden, ProcessClosed, ValidationFailed
from app.services.records import load_booking, load_dependant, load_dependant_profile
from app.services.storage import create_storage_service

logger = logging.getLogger(__name__)

ROSTER_FIELDS = ('name', 'relationship', 'date_of_birth', 'passport_number')


def remaining_slots(booking, dependant_count: int) -> int:
    """Places left after the main applicant and the existing dependants"""
    return max(booking.number_of_travelers - 1 - dependant_count, 0)


class DependantRoster:
    """Add, list and remove a booking's dependants"""

    def __init__(self, slots: DocumentSlotManager, user_lookup=find_user_email, owner_lookup=find_user_id_by_email):
        self.slots = slots
        self.user_lookup = user_lookup
        self.owner_lookup = owner_lookup

    def dependant_owner(self, caller, booking):
        """
        Account a new dependant belongs to.

        Customers own the dependants they add, even on a booking they reach
        through its customer email. An admin adds on the customer's behalf:
        the booking's account, or for a guest booking the account registered
        with its customer email. The admin keeps it only when neither exists.
        """
        if not caller.is_admin:
            return caller.user_id
        if booking.user_id:
            return booking.user_id
        return self.owner_lookup(booking.customer_email) or caller.user_id

    def get_booking(self, caller, booking_id):
        booking = load_booking(booking_id)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)
        return booking

    def list_dependants(self, caller, booking_id):
        booking = self.get_booking(caller, booking_id)
        return booking, booking.dependants.order_by(Dependant.created_at.asc()).all()

    def get_dependant(self, caller, dependant_id):
        dependant = load_dependant(dependant_id)
        ensure_dependant_access(caller, dependant)
        return dependant

    def add_dependant(self, caller, booking_id, data: Dict, profile_id: Optional[str] = None):
        """
        Add a dependant to a paid booking.

        Args:
            caller: Identity of the requester
            booking_id: Booking to add to
            data: Dependant fields; these win over the profile's values
            profile_id: Optional UserDependantProfile to copy details from

        Raises:
            NotFound, Forbidden, ProcessClosed, ValidationFailed
        """
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(caller, booking, user_lookup=self.user_lookup)

        if not booking.is_paid:
            raise ValidationFailed('Dependants can only be added after payment is completed')
        if booking.application_closed and not caller.is_admin:
            raise ProcessClosed('Application process has been closed. Cannot add dependants.')

        fields = {}
        if profile_id:
            profile = load_dependant_profile(profile_id)
            if profile.user_id != caller.user_id:
                raise Forbidden("You don't have permission to use this dependant profile")
            fields.update(profile.copy_fields())
        fields.update({key: value for key, value in data.items() if value not in (None, '')})

        missing = {key: f"{key.capitalize()} is required" for key in ('name', 'relationship') if not fields.get(key)}
        if missing:
            raise ValidationFailed('Name and relationship are required', errors=missing)

        dependant_count = booking.dependants.count()
        if 1 + dependant_count + 1 > booking.number_of_travelers:
            raise ValidationFailed(
                f"Cannot add more dependants. This booking is for {booking.number_of_travelers} "
                f"traveler(s). You have {remaining_slots(booking, dependant_count)} slot(s) remaining."
            )

        form_data = {
            key: value.isoformat() if hasattr(value, 'isoformat') else value
            for key, value in fields.items()
            if key in APPLICATION_FORM_FIELDS
        }
        dependant = Dependant(
            booking_id=booking.id,
            user_id=self.dependant_owner(caller, booking),
            application_form_data=form_data,
            supporting_documents=[],
            documents=[],
            **{key: fields.get(key) for key in ROSTER_FIELDS}
        )
        db.session.add(dependant)
        db.session.commit()

        logger.info(f"Added dependant {dependant.id} to booking {booking.id} ({dependant_count + 1} of {booking.number_of_travelers - 1})")
        return dependant

    def remove_dependant(self, caller, dependant_id):
        """Delete a dependant and, best-effort, its stored documents"""
        dependant = load_dependant(dependant_id)
        ensure_dependant_access(caller, dependant)

        booking = load_booking(dependant.booking_id, lock=True)
        if booking.application_closed and not caller.is_admin:
            raise ProcessClosed('Application process has been closed. Cannot remove dependants.')

        public_ids = self.slots.stored_public_ids(dependant)
        booking_ref = booking.id
        db.session.delete(dependant)
        db.session.commit()

        self.slots.purge(public_ids)
        logger.info(f"Removed dependant {dependant_id} from booking {booking_ref}")
        return public_ids


def create_dependant_roster():
    return DependantRoster(DocumentSlotManager(create_storage_service()))
