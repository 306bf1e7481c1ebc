from datetime import datetime, timezone
import uuid
from app.extensions import db

class UserDependantProfile(db.Model):
    """Reusable traveler details a user can copy into a booking's dependant"""
    __tablename__ = 'user_dependant_profiles'

    # Fields copied into a new Dependant
    COPYABLE_FIELDS = (
        'name', 'relationship', 'date_of_birth', 'passport_number',
        'country_of_nationality', 'first_name', 'father_name', 'last_name',
        'gender', 'marital_status', 'country_of_birth', 'city_of_birth', 'profession',
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    relationship = db.Column(db.String(50), nullable=False)
    date_of_birth = db.Column(db.Date)
    passport_number = db.Column(db.String(50))

    # Personal information
    country_of_nationality = db.Column(db.String(80))
    first_name = db.Column(db.String(100))
    father_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    gender = db.Column(db.String(10))
    marital_status = db.Column(db.String(30))
    country_of_birth = db.Column(db.String(80))
    city_of_birth = db.Column(db.String(80))
    profession = db.Column(db.String(100))

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    def copy_fields(self):
        """Field values to seed a new Dependant with"""
        return {field: getattr(self, field) for field in self.COPYABLE_FIELDS if getattr(self, field) is not None}

    def to_dict(self):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        for field in self.COPYABLE_FIELDS:
            data[field] = getattr(self, field)
        if self.date_of_birth:
            data['date_of_birth'] = self.date_of_birth.isoformat()
        return data
