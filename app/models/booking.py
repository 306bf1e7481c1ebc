from datetime import datetime, timezone
import uuid
from app.extensions import db
from app.models.application import ApplicationMixin
from app.models.enums import BookingStatus, PaymentStatus

class Booking(ApplicationMixin, db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tour_id = db.Column(db.String(36), db.ForeignKey('tours.id'), nullable=False, index=True)

    # Owner; null for bookings made before the customer had an account
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True, index=True)

    # Customer info
    package_type = db.Column(db.String(20), default='standard', nullable=False)
    customer_name = db.Column(db.String(120), nullable=False)
    customer_email = db.Column(db.String(120), nullable=False, index=True)
    customer_phone = db.Column(db.String(30), nullable=False)
    number_of_travelers = db.Column(db.Integer, default=1, nullable=False)

    # Payment
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_status = db.Column(db.Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    payment_intent_id = db.Column(db.String(100))
    booking_status = db.Column(db.Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    booking_date = db.Column(db.DateTime)
    special_requests = db.Column(db.Text)

    # Application workflow gate (admin controlled)
    application_closed = db.Column(db.Boolean, default=False, nullable=False)
    application_closed_at = db.Column(db.DateTime)
    application_closed_by = db.Column(db.String(36), db.ForeignKey('users.id'))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    dependants = db.relationship('Dependant', backref='booking', lazy='dynamic', cascade='all, delete-orphan')

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID

    def to_dict(self, include_application: bool = False):
        """
        Serialize Booking model to dictionary for API responses.

        Args:
            include_application (bool): Whether to include the main applicant's
                application form and documents

        Returns:
            dict
        """
        data = {
            # Identifiers
            "id": self.id,
            "tour_id": self.tour_id,
            "tour_title": self.tour.title if self.tour else None,

            # Ownership
            "user_id": self.user_id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,

            # Booking meta
            "package_type": self.package_type,
            "number_of_travelers": self.number_of_travelers,
            "total_amount": float(self.total_amount) if self.total_amount is not None else 0.0,
            "payment_status": self.payment_status.value if self.payment_status else None,
            "booking_status": self.booking_status.value if self.booking_status else None,
            "booking_date": self.booking_date.isoformat() if self.booking_date else None,
            "special_requests": self.special_requests,

            # Application gate
            "application_closed": bool(self.application_closed),
            "application_closed_at": self.application_closed_at.isoformat() if self.application_closed_at else None,
            "application_closed_by": self.application_closed_by,

            # Lifecycle timestamps
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_application:
            data.update(self.application_to_dict())
            data["documents"] = self.documents_to_dict()

        return data
