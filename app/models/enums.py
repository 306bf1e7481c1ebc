from enum import Enum


class UserRole(Enum):
    CUSTOMER = 'customer'
    ADMIN = 'admin'


class PaymentStatus(Enum):
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class BookingStatus(Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


class ApplicationStatus(Enum):
    PENDING = 'pending'
    SUBMITTED = 'submitted'
    UNDER_REVIEW = 'under_review'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'

    @property
    def is_terminal(self):
        """Reviewed applications can no longer be edited by the applicant"""
        return self in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)


class DocumentType(Enum):
    PERSONAL_PASSPORT_PICTURE = 'personal_passport_picture'
    INTERNATIONAL_PASSPORT = 'international_passport'
    SUPPORTING_DOCUMENT = 'supporting_document'


class Gender(Enum):
    MALE = 'male'
    FEMALE = 'female'
    OTHER = 'other'


class ReviewStatus(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
