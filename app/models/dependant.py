from datetime import datetime, timezone
import uuid
from app.extensions import db
from app.models.application import ApplicationMixin

class Dependant(ApplicationMixin, db.Model):
    __tablename__ = 'dependants'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    booking_id = db.Column(db.String(36), db.ForeignKey('bookings.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)

    # Basic info
    name = db.Column(db.String(120), nullable=False)
    relationship = db.Column(db.String(50), nullable=False)
    date_of_birth = db.Column(db.Date)
    passport_number = db.Column(db.String(50))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def to_dict(self, include_application: bool = True):
        data = {
            'id': self.id,
            'booking_id': self.booking_id,
            'user_id': self.user_id,
            'name': self.name,
            'relationship': self.relationship,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'passport_number': self.passport_number,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_application:
            data.update(self.application_to_dict())
            data['documents'] = self.documents_to_dict()
        return data
