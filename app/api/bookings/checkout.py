from datetime import datetime, time

from flask import request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from sqlalchemy import desc, func, or_

from app.api.bookings import bookings_bp
from app.api.bookings.schemas import BookingSchemas
from app.extensions import db
from app.models import Booking, Tour
from app.models.enums import BookingStatus, PaymentStatus
from app.services.access import ensure_booking_access
from app.services.errors import ApplicationError
from app.services.payment import PaymentServiceError, create_payment_service
from app.services.records import load_booking
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import current_caller


@bookings_bp.route('', methods=['POST'])
@jwt_required(optional=True)
def create_booking():
    """
    Create a pending booking for a tour

    Request Body:
        {
            "tourId": "...",
            "customerName": "Jane Doe",
            "customerEmail": "jane@example.com",
            "customerPhone": "+1234567890",
            "numberOfTravelers": 3,
            "bookingDate": "2026-11-01" (optional),
            "specialRequests": "..." (optional)
        }
    """
    try:
        is_valid, errors, cleaned_data = BookingSchemas.validate_booking_create(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        tour = db.session.get(Tour, cleaned_data['tour_id'])
        if not tour or tour.status != 'published':
            return APIResponse.not_found("Tour not found")

        booking_date = cleaned_data.get('booking_date')
        booking = Booking(
            tour_id=tour.id,
            user_id=get_jwt_identity(),
            package_type=tour.package_type,
            customer_name=cleaned_data['customer_name'],
            customer_email=cleaned_data['customer_email'],
            customer_phone=cleaned_data['customer_phone'],
            number_of_travelers=cleaned_data['number_of_travelers'],
            total_amount=tour.price_per_person * cleaned_data['number_of_travelers'],
            payment_status=PaymentStatus.PENDING,
            booking_status=BookingStatus.PENDING,
            booking_date=datetime.combine(booking_date, time.min) if booking_date else None,
            special_requests=cleaned_data.get('special_requests'),
            application_form_data={},
            supporting_documents=[],
            documents=[]
        )
        db.session.add(booking)
        db.session.commit()

        AuditLogger.log_action(
            user_id=booking.user_id,
            action='booking_created',
            entity_type='booking',
            entity_id=booking.id,
            description=f'Booking created for tour {tour.title} ({booking.number_of_travelers} traveler(s))'
        )

        return APIResponse.success(
            data=booking.to_dict(),
            message='Booking created successfully',
            status_code=201
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Create booking error: {str(e)}")
        return APIResponse.error("Failed to create booking", status_code=500)


@bookings_bp.route('/mine', methods=['GET'])
@jwt_required()
def get_my_bookings():
    """Bookings owned by the caller by account or by customer email"""
    try:
        caller = current_caller()
        conditions = [Booking.user_id == caller.user_id]
        if caller.email:
            conditions.append(func.lower(Booking.customer_email) == caller.email.strip().lower())

        bookings = Booking.query.filter(or_(*conditions)).order_by(desc(Booking.created_at)).all()

        return APIResponse.success(
            data=[booking.to_dict() for booking in bookings],
            message=f"Found {len(bookings)} booking(s)"
        )

    except Exception as e:
        current_app.logger.error(f"Get my bookings error: {str(e)}")
        return APIResponse.error("Failed to fetch bookings", status_code=500)


@bookings_bp.route('/<booking_id>', methods=['GET'])
@jwt_required()
def get_booking(booking_id):
    try:
        booking = load_booking(booking_id)
        ensure_booking_access(current_caller(), booking)

        data = booking.to_dict(include_application=True)
        data['dependant_count'] = booking.dependants.count()
        return APIResponse.success(data=data)

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get booking error: {str(e)}")
        return APIResponse.error("Failed to fetch booking", status_code=500)


@bookings_bp.route('/<booking_id>/payment-intent', methods=['POST'])
@jwt_required()
def create_payment_intent(booking_id):
    """Start a Stripe payment for the booking total"""
    try:
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(current_caller(), booking)

        if booking.is_paid:
            db.session.rollback()
            return APIResponse.error('Booking is already paid', status_code=409, code='already_paid')

        intent = create_payment_service().start_booking_payment(booking)
        booking.payment_intent_id = intent['paymentIntentId']
        db.session.commit()

        return APIResponse.success(data=intent, message='Payment intent created')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except PaymentServiceError as e:
        db.session.rollback()
        return APIResponse.error(str(e), status_code=502, code='payment_failed')
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Create payment intent error: {str(e)}")
        return APIResponse.error("Failed to create payment intent", status_code=500)


@bookings_bp.route('/<booking_id>/confirm', methods=['POST'])
@jwt_required()
def confirm_booking(booking_id):
    """
    Mark the booking paid once its Stripe payment intent has succeeded

    Request Body:
        {
            "paymentIntentId": "pi_..." (optional when an intent was created for the booking)
        }
    """
    try:
        data = request.get_json(silent=True) or {}
        caller = current_caller()
        booking = load_booking(booking_id, lock=True)
        ensure_booking_access(caller, booking)

        if booking.is_paid:
            db.session.rollback()
            return APIResponse.success(data=booking.to_dict(), message='Booking already confirmed')

        payment_intent_id = data.get('paymentIntentId') or booking.payment_intent_id
        if not payment_intent_id:
            db.session.rollback()
            return APIResponse.validation_error({'paymentIntentId': 'Payment intent is required'})

        result = create_payment_service().verify_booking_payment(booking, payment_intent_id)
        if not result['paid']:
            db.session.rollback()
            return APIResponse.error(result['message'], status_code=402, code='payment_incomplete')

        booking.payment_intent_id = payment_intent_id
        booking.payment_status = PaymentStatus.PAID
        booking.booking_status = BookingStatus.CONFIRMED
        db.session.commit()

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='booking_paid',
            entity_type='booking',
            entity_id=booking.id,
            description=f'Payment {payment_intent_id} confirmed for booking {booking.id}'
        )

        return APIResponse.success(data=booking.to_dict(), message='Booking confirmed')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except PaymentServiceError as e:
        db.session.rollback()
        return APIResponse.error(str(e), status_code=502, code='payment_failed')
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Confirm booking error: {str(e)}")
        return APIResponse.error("Failed to confirm booking", status_code=500)
