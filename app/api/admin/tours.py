from flask import request, current_app
from sqlalchemy import desc

from app.api.admin import admin_bp
from app.api.admin.schemas import AdminSchemas
from app.extensions import db
from app.models import Tour
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import admin_required, current_caller

# ===== TOUR MANAGEMENT =====


@admin_bp.route('/tours', methods=['GET'])
@admin_required()
def get_tours():
    """Every tour, drafts and archived ones included"""
    try:
        query = Tour.query
        if request.args.get('status'):
            query = query.filter_by(status=request.args['status'])

        tours = query.order_by(desc(Tour.created_at)).all()
        return APIResponse.success(data=[tour.to_dict() for tour in tours])

    except Exception as e:
        current_app.logger.error(f"Get tours error: {str(e)}")
        return APIResponse.error("Failed to fetch tours", status_code=500)


@admin_bp.route('/tours', methods=['POST'])
@admin_required()
def create_tour():
    try:
        is_valid, errors, cleaned_data = AdminSchemas.validate_tour(request.get_json(silent=True) or {})
        if not is_valid:
            return APIResponse.validation_error(errors)

        tour = Tour(**cleaned_data)
        db.session.add(tour)
        db.session.commit()

        AuditLogger.log_action(
            user_id=current_caller().user_id,
            action='tour_created',
            entity_type='tour',
            entity_id=tour.id,
            description=f'Created tour: {tour.title}'
        )

        return APIResponse.success(data=tour.to_dict(), message='Tour created successfully', status_code=201)

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Create tour error: {str(e)}")
        return APIResponse.error("Failed to create tour", status_code=500)


@admin_bp.route('/tours/<tour_id>', methods=['PATCH'])
@admin_required()
def update_tour(tour_id):
    try:
        tour = db.session.get(Tour, tour_id)
        if not tour:
            return APIResponse.not_found("Tour not found")

        is_valid, errors, cleaned_data = AdminSchemas.validate_tour(request.get_json(silent=True) or {}, partial=True)
        if not is_valid:
            return APIResponse.validation_error(errors)

        for field, value in cleaned_data.items():
            setattr(tour, field, value)
        db.session.commit()

        AuditLogger.log_action(
            user_id=current_caller().user_id,
            action='tour_updated',
            entity_type='tour',
            entity_id=tour.id,
            description=f'Updated tour: {tour.title}',
            changes={'fields': sorted(cleaned_data)}
        )

        return APIResponse.success(data=tour.to_dict(), message='Tour updated successfully')

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Update tour error: {str(e)}")
        return APIResponse.error("Failed to update tour", status_code=500)


@admin_bp.route('/tours/<tour_id>', methods=['DELETE'])
@admin_required()
def delete_tour(tour_id):
    """Delete a tour, or archive it when bookings reference it"""
    try:
        tour = db.session.get(Tour, tour_id)
        if not tour:
            return APIResponse.not_found("Tour not found")

        if tour.bookings.count() > 0:
            tour.status = 'archived'
            db.session.commit()
            message = 'Tour has bookings and was archived instead of deleted'
        else:
            db.session.delete(tour)
            db.session.commit()
            message = 'Tour deleted successfully'

        AuditLogger.log_action(
            user_id=current_caller().user_id,
            action='tour_deleted',
            entity_type='tour',
            entity_id=tour_id,
            description=message
        )

        return APIResponse.success(message=message)

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete tour error: {str(e)}")
        return APIResponse.error("Failed to delete tour", status_code=500)
