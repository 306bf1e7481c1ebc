from flask import request, current_app
from sqlalchemy import or_, desc

from app.api.admin import admin_bp
from app.api.admin.schemas import AdminSchemas
from app.extensions import db
from app.models import Booking, Dependant
from app.models.enums import ApplicationStatus
from app.services.applications import create_application_service
from app.services.errors import ApplicationError
from app.services.records import load_booking
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import admin_required, current_caller

# ===== APPLICATION REVIEW =====


def _booking_applications(booking):
    data = booking.to_dict(include_application=True)
    data['dependants'] = [
        dependant.to_dict()
        for dependant in booking.dependants.order_by(Dependant.created_at.asc()).all()
    ]
    return data


@admin_bp.route('/applications', methods=['GET'])
@admin_required()
def get_applications():
    """
    Bookings with at least one submitted application, newest first

    Query params:
        - page, perPage: Pagination
        - status: Filter by the main applicant's application status
    """
    try:
        args = request.args.to_dict()
        pagination = AdminSchemas.validate_pagination(args)

        query = Booking.query.filter(or_(
            Booking.application_form_submitted.is_(True),
            Booking.dependants.any(Dependant.application_form_submitted.is_(True))
        ))

        if args.get('status'):
            try:
                query = query.filter(Booking.application_status == ApplicationStatus(args['status']))
            except ValueError:
                return APIResponse.validation_error({'status': 'Unknown application status'})

        paginated = query.order_by(desc(Booking.created_at)).paginate(
            page=pagination['page'],
            per_page=pagination['per_page'],
            error_out=False
        )

        return APIResponse.success({
            'applications': [_booking_applications(booking) for booking in paginated.items],
            'pagination': {
                'page': paginated.page,
                'perPage': paginated.per_page,
                'totalPages': paginated.pages,
                'totalItems': paginated.total
            }
        })

    except Exception as e:
        current_app.logger.error(f"Get applications error: {str(e)}")
        return APIResponse.error("Failed to fetch applications", status_code=500)


@admin_bp.route('/bookings/<booking_id>/applications', methods=['GET'])
@admin_required()
def get_booking_applications(booking_id):
    """Main applicant and every dependant application for one booking"""
    try:
        booking = load_booking(booking_id)
        return APIResponse.success(data=_booking_applications(booking))

    except ApplicationError as e:
        return APIResponse.from_exception(e)
    except Exception as e:
        current_app.logger.error(f"Get booking applications error: {str(e)}")
        return APIResponse.error("Failed to fetch applications", status_code=500)


@admin_bp.route('/bookings/<booking_id>/applications', methods=['PATCH'])
@admin_required()
def set_booking_application_state(booking_id):
    """
    Close or reopen the application process for a booking

    Request Body:
        {"action": "close" | "reopen"}
    """
    try:
        data = request.get_json(silent=True) or {}
        caller = current_caller()
        booking = create_application_service().set_application_closed(caller, booking_id, data.get('action'))

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_process_closed' if booking.application_closed else 'application_process_reopened',
            entity_type='booking',
            entity_id=booking.id,
            description=f"Application process {'closed' if booking.application_closed else 'reopened'}"
        )

        return APIResponse.success(
            data=booking.to_dict(),
            message='Application process closed' if booking.application_closed else 'Application process reopened'
        )

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Set application state error: {str(e)}")
        return APIResponse.error("Failed to update application process", status_code=500)


@admin_bp.route('/bookings/<booking_id>/user-application-status', methods=['PATCH'])
@admin_required()
def review_user_application(booking_id):
    """
    Set the main applicant's application status

    Request Body:
        {"status": "pending" | "submitted" | "under_review" | "accepted" | "rejected"}
    """
    try:
        data = request.get_json(silent=True) or {}
        caller = current_caller()
        booking = create_application_service().review_booking_application(caller, booking_id, data.get('status'))

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_reviewed',
            entity_type='booking',
            entity_id=booking.id,
            description=f'Main applicant application set to {booking.application_status.value}',
            changes={'status': booking.application_status.value}
        )

        return APIResponse.success(data=booking.to_dict(include_application=True), message='Application status updated')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Review user application error: {str(e)}")
        return APIResponse.error("Failed to update application status", status_code=500)


@admin_bp.route('/dependants/<dependant_id>/application-status', methods=['PATCH'])
@admin_required()
def review_dependant_application(dependant_id):
    try:
        data = request.get_json(silent=True) or {}
        caller = current_caller()
        dependant = create_application_service().review_dependant_application(caller, dependant_id, data.get('status'))

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='application_reviewed',
            entity_type='dependant',
            entity_id=dependant.id,
            description=f'Dependant application set to {dependant.application_status.value}',
            changes={'status': dependant.application_status.value}
        )

        return APIResponse.success(data=dependant.to_dict(), message='Application status updated')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Review dependant application error: {str(e)}")
        return APIResponse.error("Failed to update application status", status_code=500)
