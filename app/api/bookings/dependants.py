from flask import request, current_app
from flask_jwt_extended import jwt_required

from app.api.bookings import bookings_bp
from app.api.bookings.schemas import DependantSchemas
from app.extensions import db
from app.services.dependants import create_dependant_roster, remaining_slots
from app.services.errors import ApplicationError
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import current_caller


@bookings_bp.route('/<booking_id>/dependants', methods=['GET'])
@jwt_required()
def get_dependants(booking_id):
    try:
        booking, dependants = create_dependant_roster().list_dependants(current_caller(), booking_id)

        return APIResponse.success(data={
            'dependants': [dependant.to_dict() for dependant in dependants],
            'number_of_travelers': booking.number_of_travelers,
            'remaining_slots': remaining_slots(booking, len(dependants)),
            'application_closed': bool(booking.application_closed),
        })

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get dependants error: {str(e)}")
        return APIResponse.error("Failed to fetch dependants", status_code=500)


@bookings_bp.route('/<booking_id>/dependants', methods=['POST'])
@jwt_required()
def add_dependant(booking_id):
    """
    Add a dependant to a paid booking

    Request Body:
        {
            "name": "Sara Doe",
            "relationship": "daughter",
            "dateOfBirth": "2015-04-02" (optional),
            "passportNumber": "X1234567" (optional),
            "profileId": "..." (optional, copy details from a saved profile)
        }
    """
    try:
        caller = current_caller()
        roster = create_dependant_roster()
        roster.get_booking(caller, booking_id)

        data = request.get_json(silent=True)
        is_valid, errors, cleaned_data = DependantSchemas.validate_dependant(data)
        if not is_valid:
            return APIResponse.validation_error(errors)

        dependant = roster.add_dependant(
            caller, booking_id, cleaned_data, profile_id=data.get('profileId')
        )

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='dependant_added',
            entity_type='dependant',
            entity_id=dependant.id,
            description=f'Added dependant {dependant.name} to booking {booking_id}'
        )

        return APIResponse.success(data=dependant.to_dict(), message='Dependant added successfully', status_code=201)

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Add dependant error: {str(e)}")
        return APIResponse.error("Failed to add dependant", status_code=500)
