from app.extensions import db
from app.models import Booking, Dependant, Review, UserDependantProfile
from app.services.errors import NotFound


def _load(model, record_id, lock):
    if not record_id:
        return None
    if lock:
        # Serialises read-modify-write on the row where the backend supports it
        stmt = db.select(model).filter_by(id=str(record_id)).with_for_update()
        return db.session.execute(stmt).scalar_one_or_none()
    return db.session.get(model, str(record_id))


def load_booking(booking_id, lock=False):
    booking = _load(Booking, booking_id, lock)
    if not booking:
        raise NotFound('Booking not found')
    return booking


def load_dependant(dependant_id, lock=False):
    dependant = _load(Dependant, dependant_id, lock)
    if not dependant:
        raise NotFound('Dependant not found')
    return dependant


def load_dependant_profile(profile_id):
    profile = _load(UserDependantProfile, profile_id, False)
    if not profile:
        raise NotFound('Dependant profile not found')
    return profile


def load_review(review_id):
    review = _load(Review, review_id, False)
    if not review:
        raise NotFound('Review not found')
    return review
