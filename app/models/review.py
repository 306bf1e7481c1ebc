from datetime import datetime, timezone
import uuid
from app.extensions import db
from app.models.enums import ReviewStatus

class Review(db.Model):
    """A customer's rating of a tour, shown publicly once approved"""
    __tablename__ = 'reviews'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tour_id = db.Column(db.String(36), db.ForeignKey('tours.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    user_name = db.Column(db.String(120), nullable=False)

    rating = db.Column(db.Integer, nullable=False)  # 1-5
    comment = db.Column(db.Text, nullable=False)
    status = db.Column(db.Enum(ReviewStatus), default=ReviewStatus.PENDING, nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    tour = db.relationship('Tour', backref=db.backref('reviews', lazy='dynamic', cascade='all, delete-orphan'))
    author = db.relationship('User', backref=db.backref('reviews', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'tour_id': self.tour_id,
            'tour_title': self.tour.title if self.tour else None,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'rating': self.rating,
            'comment': self.comment,
            'status': self.status.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
