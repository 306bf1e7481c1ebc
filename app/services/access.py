"""
Access checks for bookings and dependants.

The caller identity is always passed in explicitly; nothing here reads the
request or the token.
"""
import logging

from app.models.enums import UserRole
from app.services.errors import Forbidden

logger = logging.getLogger(__name__)


class Caller:
    """Identity of whoever is making the request"""

    def __init__(self, user_id, email=None, role=UserRole.CUSTOMER.value):
        self.user_id = str(user_id) if user_id is not None else None
        self.email = email
        self.role = role.value if isinstance(role, UserRole) else role

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value

    def __repr__(self):
        return f"<Caller {self.user_id} role={self.role}>"


def find_user_email(user_id):
    """Default user lookup used when the token carries no email claim"""
    from app.models import User
    from app.extensions import db

    user = db.session.get(User, user_id) if user_id else None
    return user.email if user else None


def find_user_id_by_email(email):
    """Account registered with this email, compared case-insensitively"""
    from app.models import User
    from sqlalchemy import func

    if not email:
        return None
    user = User.query.filter(func.lower(User.email) == email.strip().lower()).first()
    return user.id if user else None


def _same_email(left, right):
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


def can_access_booking(caller, booking, user_lookup=find_user_email):
    """
    Decide whether the caller may read or change a booking's application data.

    Admins always pass. Otherwise the caller must own the booking by user id,
    or, failing that, by the customer email recorded on the booking.
    """
    if caller.is_admin:
        return True

    if booking.user_id and booking.user_id == caller.user_id:
        return True

    email = caller.email
    if not email:
        email = user_lookup(caller.user_id)

    return _same_email(email, booking.customer_email)


def can_access_dependant(caller, dependant):
    return caller.is_admin or dependant.user_id == caller.user_id


def ensure_booking_access(caller, booking, user_lookup=find_user_email):
    if not can_access_booking(caller, booking, user_lookup=user_lookup):
        logger.warning(f"Denied {caller!r} access to booking {booking.id}")
        raise Forbidden("You don't have permission to access this booking")


def ensure_dependant_access(caller, dependant):
    if not can_access_dependant(caller, dependant):
        logger.warning(f"Denied {caller!r} access to dependant {dependant.id}")
        raise Forbidden("You don't have permission to access this dependant")


def ensure_admin(caller):
    if not caller.is_admin:
        raise Forbidden("Admin access required")
