from flask import request, current_app
from sqlalchemy import or_, desc

from app.api.admin import admin_bp
from app.api.admin.schemas import AdminSchemas
from app.extensions import db
from app.models import Booking
from app.models.enums import BookingStatus, PaymentStatus
from app.services.errors import ApplicationError
from app.services.records import load_booking
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import admin_required, current_caller

# ===== BOOKING MANAGEMENT =====


@admin_bp.route('/bookings', methods=['GET'])
@admin_required()
def get_bookings():
    """
    Get paginated list of bookings with filtering

    Query params:
        - page, perPage: Pagination
        - search: Search in customer name or email
        - bookingStatus: Filter by booking status
        - paymentStatus: Filter by payment status
        - tourId: Filter by tour
    """
    try:
        args = request.args.to_dict()
        pagination = AdminSchemas.validate_pagination(args)

        query = Booking.query

        if args.get('search'):
            search_term = f"%{args['search']}%"
            query = query.filter(or_(
                Booking.customer_name.ilike(search_term),
                Booking.customer_email.ilike(search_term)
            ))

        try:
            if args.get('bookingStatus'):
                query = query.filter_by(booking_status=BookingStatus(args['bookingStatus']))
            if args.get('paymentStatus'):
                query = query.filter_by(payment_status=PaymentStatus(args['paymentStatus']))
        except ValueError:
            return APIResponse.validation_error({'status': 'Unknown status filter'})

        if args.get('tourId'):
            query = query.filter_by(tour_id=args['tourId'])

        # Sort by creation date (newest first)
        paginated = query.order_by(desc(Booking.created_at)).paginate(
            page=pagination['page'],
            per_page=pagination['per_page'],
            error_out=False
        )

        bookings_data = []
        for booking in paginated.items:
            booking_dict = booking.to_dict()
            booking_dict['dependant_count'] = booking.dependants.count()
            if booking.customer:
                booking_dict['customer'] = {
                    'id': booking.customer.id,
                    'fullName': booking.customer.get_full_name(),
                    'email': booking.customer.email
                }
            bookings_data.append(booking_dict)

        return APIResponse.success({
            'bookings': bookings_data,
            'pagination': {
                'page': paginated.page,
                'perPage': paginated.per_page,
                'totalPages': paginated.pages,
                'totalItems': paginated.total
            }
        })

    except Exception as e:
        current_app.logger.error(f"Get bookings error: {str(e)}")
        return APIResponse.error("Failed to fetch bookings", status_code=500)


@admin_bp.route('/bookings/<booking_id>', methods=['PATCH'])
@admin_required()
def update_booking(booking_id):
    """Update booking and payment status"""
    try:
        data = request.get_json(silent=True) or {}
        is_valid, errors, cleaned_data = AdminSchemas.validate_booking_update(data)
        if not is_valid:
            return APIResponse.validation_error(errors)

        booking = load_booking(booking_id, lock=True)
        old_values = {
            'booking_status': booking.booking_status.value,
            'payment_status': booking.payment_status.value,
        }

        for field, value in cleaned_data.items():
            setattr(booking, field, value)
        db.session.commit()

        caller = current_caller()
        AuditLogger.log_action(
            user_id=caller.user_id,
            action='booking_updated',
            entity_type='booking',
            entity_id=booking.id,
            description=f'Admin updated booking {booking.id}',
            changes={
                'old': old_values,
                'new': {
                    'booking_status': booking.booking_status.value,
                    'payment_status': booking.payment_status.value,
                }
            }
        )

        return APIResponse.success(data=booking.to_dict(), message='Booking updated successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Update booking error: {str(e)}")
        return APIResponse.error("Failed to update booking", status_code=500)
