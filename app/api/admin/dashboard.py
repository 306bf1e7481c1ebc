from flask import current_app
from sqlalchemy import func

from app.api.admin import admin_bp
from app.extensions import db
from app.models import Booking, Dependant, Review, Tour, User
from app.models.enums import ApplicationStatus, BookingStatus, PaymentStatus, ReviewStatus
from app.utils.api_response import APIResponse
from app.utils.decorators import admin_required

# ===== DASHBOARD STATS =====


@admin_bp.route('/stats', methods=['GET'])
@admin_required()
def get_admin_stats():
    """
    Headline counts for the admin dashboard

    Returns:
        - Tours, bookings (total and pending), users, reviews (total and pending)
        - Applications waiting for review, main applicants and dependants together
        - Revenue from paid bookings
    """
    try:
        waiting = (ApplicationStatus.SUBMITTED, ApplicationStatus.UNDER_REVIEW)

        revenue = db.session.query(
            func.sum(Booking.total_amount)
        ).filter(Booking.payment_status == PaymentStatus.PAID).scalar() or 0

        applications_to_review = (
            Booking.query.filter(Booking.application_status.in_(waiting)).count()
            + Dependant.query.filter(Dependant.application_status.in_(waiting)).count()
        )

        return APIResponse.success(data={
            'totalTours': Tour.query.count(),
            'totalBookings': Booking.query.count(),
            'pendingBookings': Booking.query.filter_by(booking_status=BookingStatus.PENDING).count(),
            'totalUsers': User.query.count(),
            'totalReviews': Review.query.count(),
            'pendingReviews': Review.query.filter_by(status=ReviewStatus.PENDING).count(),
            'applicationsToReview': applications_to_review,
            'closedApplications': Booking.query.filter_by(application_closed=True).count(),
            'revenue': float(revenue),
        })

    except Exception as e:
        current_app.logger.error(f"Admin stats error: {str(e)}")
        return APIResponse.error("Failed to fetch stats", status_code=500)
