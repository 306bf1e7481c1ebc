from flask import request, current_app
from sqlalchemy import desc

from app.api.admin import admin_bp
from app.api.admin.schemas import AdminSchemas
from app.extensions import db
from app.models import Review
from app.models.enums import ReviewStatus
from app.services.errors import ApplicationError
from app.services.records import load_review
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import admin_required, current_caller

# ===== REVIEW MODERATION =====


@admin_bp.route('/reviews', methods=['GET'])
@admin_required()
def get_reviews():
    """
    Get paginated reviews in every moderation state

    Query params:
        - page, perPage: Pagination
        - status: pending, approved or rejected
        - tourId: Filter by tour
    """
    try:
        args = request.args.to_dict()
        pagination = AdminSchemas.validate_pagination(args)

        query = Review.query

        if args.get('status'):
            try:
                query = query.filter(Review.status == ReviewStatus(args['status'].lower()))
            except ValueError:
                return APIResponse.error("Invalid review status filter")

        if args.get('tourId'):
            query = query.filter(Review.tour_id == args['tourId'])

        paginated = query.order_by(desc(Review.created_at)).paginate(
            page=pagination['page'],
            per_page=pagination['per_page'],
            error_out=False
        )

        return APIResponse.success({
            'reviews': [review.to_dict() for review in paginated.items],
            'pagination': {
                'page': paginated.page,
                'perPage': paginated.per_page,
                'totalPages': paginated.pages,
                'totalItems': paginated.total
            }
        })

    except Exception as e:
        current_app.logger.error(f"Get admin reviews error: {str(e)}")
        return APIResponse.error("Failed to fetch reviews", status_code=500)


@admin_bp.route('/reviews/<review_id>', methods=['PATCH'])
@admin_required()
def moderate_review(review_id):
    """Approve, reject or send a review back to pending"""
    try:
        review = load_review(review_id)

        is_valid, errors, cleaned_data = AdminSchemas.validate_review_status(request.get_json(silent=True) or {})
        if not is_valid:
            return APIResponse.validation_error(errors)

        previous = review.status.value
        review.status = cleaned_data['status']
        db.session.commit()

        AuditLogger.log_action(
            user_id=current_caller().user_id,
            action='review_moderated',
            entity_type='review',
            entity_id=review.id,
            description=f'Review {previous} -> {review.status.value}',
            changes={'status': {'old': previous, 'new': review.status.value}}
        )

        return APIResponse.success(data=review.to_dict(), message='Review status updated')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Moderate review error: {str(e)}")
        return APIResponse.error("Failed to update review", status_code=500)


@admin_bp.route('/reviews/<review_id>', methods=['DELETE'])
@admin_required()
def delete_review(review_id):
    try:
        review = load_review(review_id)
        db.session.delete(review)
        db.session.commit()

        AuditLogger.log_action(
            user_id=current_caller().user_id,
            action='review_deleted',
            entity_type='review',
            entity_id=review_id,
            description='Review removed by admin'
        )

        return APIResponse.success(message='Review deleted')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete review error: {str(e)}")
        return APIResponse.error("Failed to delete review", status_code=500)
