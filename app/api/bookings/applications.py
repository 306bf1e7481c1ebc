from flask import request, current_app
from flask_jwt_extended import jwt_required

from app.api.bookings import bookings_bp
from app.api.bookings.schemas import ApplicationSchemas
from app.extensions import db
from app.services.applications import create_application_service
from app.services.errors import ApplicationError
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import current_caller

# ===== MAIN APPLICANT VISA APPLICATION =====


def _application_payload(booking):
    data = booking.application_to_dict()
    data.update({
        'booking_id': booking.id,
        'customer_name': booking.customer_name,
        'customer_email': booking.customer_email,
        'application_closed': bool(booking.application_closed),
        'documents': booking.documents_to_dict(),
    })
    return data


@bookings_bp.route('/<booking_id>/user-application', methods=['GET'])
@jwt_required()
def get_user_application(booking_id):
    try:
        booking = create_application_service().get_booking_application(current_caller(), booking_id)
        return APIResponse.success(data=_application_payload(booking))

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get user application error: {str(e)}")
        return APIResponse.error("Failed to fetch application", status_code=500)


@bookings_bp.route('/<booking_id>/user-application', methods=['POST'])
@jwt_required()
def submit_user_application(booking_id):
    """
    Submit (or resubmit) the main applicant's application form.

    The whole form is replaced. The first submission moves the application
    to "submitted" and notifies the admins.
    """
    try:
        caller = current_caller()
        service = create_application_service()
        service.get_booking_application(caller, booking_id)

        is_valid, errors, form_data = ApplicationSchemas.validate_submission(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        booking, is_new_submission = service.submit_booking_application(
            caller, booking_id, form_data
        )

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_submitted' if is_new_submission else 'application_resubmitted',
            entity_type='booking',
            entity_id=booking.id,
            description=f'Main applicant application {booking.application_number} saved'
        )

        return APIResponse.success(
            data=_application_payload(booking),
            message='Application submitted successfully' if is_new_submission else 'Application updated successfully',
            status_code=201 if is_new_submission else 200
        )

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Submit user application error: {str(e)}")
        return APIResponse.error("Failed to submit application", status_code=500)


@bookings_bp.route('/<booking_id>/user-application', methods=['PATCH'])
@jwt_required()
def patch_user_application(booking_id):
    """Update only the form fields present in the request"""
    try:
        caller = current_caller()
        service = create_application_service()
        service.get_booking_application(caller, booking_id)

        is_valid, errors, form_data = ApplicationSchemas.validate_patch(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        booking = service.patch_booking_application(caller, booking_id, form_data)

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_updated',
            entity_type='booking',
            entity_id=booking.id,
            description='Main applicant application updated',
            changes={'fields': sorted(form_data)}
        )

        return APIResponse.success(data=_application_payload(booking), message='Application updated successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Patch user application error: {str(e)}")
        return APIResponse.error("Failed to update application", status_code=500)
