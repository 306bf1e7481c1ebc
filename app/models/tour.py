from datetime import datetime, timezone
import uuid
from app.extensions import db

class Tour(db.Model):
    __tablename__ = 'tours'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    package_type = db.Column(db.String(20), default='standard', nullable=False)  # standard, umrah
    description = db.Column(db.Text)

    # Trip details
    departure = db.Column(db.String(100))
    accommodation = db.Column(db.String(200))
    dates = db.Column(db.String(100))

    # Pricing
    price_per_person = db.Column(db.Numeric(10, 2), nullable=False)

    # Package details
    itinerary = db.Column(db.JSON)  # [{"day": 1, "title": ..., "description": ...}]
    inclusions = db.Column(db.JSON)
    exclusions = db.Column(db.JSON)

    # Media
    image = db.Column(db.String(500))
    gallery = db.Column(db.JSON)

    status = db.Column(db.String(20), default='published', nullable=False)  # draft, published, archived

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    bookings = db.relationship('Booking', backref='tour', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'category': self.category,
            'package_type': self.package_type,
            'description': self.description,
            'departure': self.departure,
            'accommodation': self.accommodation,
            'dates': self.dates,
            'price_per_person': float(self.price_per_person) if self.price_per_person is not None else 0.0,
            'itinerary': self.itinerary or [],
            'inclusions': self.inclusions or [],
            'exclusions': self.exclusions or [],
            'image': self.image,
            'gallery': self.gallery or [],
            'status': self.status,
        }
