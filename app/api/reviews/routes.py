from flask import request, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy import desc

from app.api.reviews import reviews_bp
from app.api.reviews.schemas import ReviewSchemas
from app.extensions import db
from app.models import Review, Tour, User
from app.models.enums import ReviewStatus
from app.services.errors import ApplicationError, Forbidden, NotFound
from app.services.records import load_review
from app.utils.api_response import APIResponse
from app.utils.audit_logging import AuditLogger
from app.utils.decorators import current_caller


def _editable_review(caller, review_id):
    review = load_review(review_id)
    if not caller.is_admin and review.user_id != caller.user_id:
        raise Forbidden("You don't have permission to change this review")
    return review


@reviews_bp.route('', methods=['GET'])
def get_reviews():
    """
    Approved reviews, newest first

    Query Parameters:
        tourId: Only reviews of this tour
    """
    try:
        query = Review.query.filter_by(status=ReviewStatus.APPROVED)
        if request.args.get('tourId'):
            query = query.filter_by(tour_id=request.args['tourId'])

        reviews = query.order_by(desc(Review.created_at)).all()
        return APIResponse.success(data=[review.to_dict() for review in reviews])

    except Exception as e:
        current_app.logger.error(f"List reviews error: {str(e)}")
        return APIResponse.error("Failed to fetch reviews", status_code=500)


@reviews_bp.route('', methods=['POST'])
@jwt_required()
def create_review():
    """
    Review a tour. New reviews wait for moderation before they are listed.

    Request Body:
        {
            "tourId": "...",
            "rating": 1-5,
            "comment": "..."
        }
    """
    try:
        is_valid, errors, cleaned_data = ReviewSchemas.validate_review(request.get_json(silent=True))
        if not is_valid:
            return APIResponse.validation_error(errors)

        caller = current_caller()
        if not db.session.get(Tour, cleaned_data['tour_id']):
            raise NotFound('Tour not found')

        author = db.session.get(User, caller.user_id)
        if not author:
            raise NotFound('User not found')

        review = Review(
            user_id=author.id,
            user_name=author.get_full_name(),
            status=ReviewStatus.PENDING,
            **cleaned_data
        )
        db.session.add(review)
        db.session.commit()

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='review_created',
            entity_type='review',
            entity_id=review.id,
            description=f'Reviewed tour {review.tour_id} with {review.rating} star(s)'
        )

        return APIResponse.success(data=review.to_dict(), message='Review submitted for moderation', status_code=201)

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Create review error: {str(e)}")
        return APIResponse.error("Failed to submit review", status_code=500)


@reviews_bp.route('/mine', methods=['GET'])
@jwt_required()
def get_my_reviews():
    """The caller's reviews in every moderation state"""
    try:
        reviews = Review.query.filter_by(
            user_id=current_caller().user_id
        ).order_by(desc(Review.created_at)).all()

        return APIResponse.success(data=[review.to_dict() for review in reviews])

    except Exception as e:
        current_app.logger.error(f"Get my reviews error: {str(e)}")
        return APIResponse.error("Failed to fetch reviews", status_code=500)


@reviews_bp.route('/<review_id>', methods=['PUT', 'PATCH'])
@jwt_required()
def update_review(review_id):
    """Edit rating or comment. A customer's edit goes back to moderation."""
    try:
        caller = current_caller()
        review = _editable_review(caller, review_id)

        is_valid, errors, cleaned_data = ReviewSchemas.validate_review(request.get_json(silent=True), partial=True)
        if not is_valid:
            return APIResponse.validation_error(errors)

        for field, value in cleaned_data.items():
            setattr(review, field, value)
        if cleaned_data and not caller.is_admin:
            review.status = ReviewStatus.PENDING
        db.session.commit()

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='review_updated',
            entity_type='review',
            entity_id=review.id,
            description='Review updated',
            changes={'fields': sorted(cleaned_data)}
        )

        return APIResponse.success(data=review.to_dict(), message='Review updated successfully')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Update review error: {str(e)}")
        return APIResponse.error("Failed to update review", status_code=500)


@reviews_bp.route('/<review_id>', methods=['DELETE'])
@jwt_required()
def delete_review(review_id):
    try:
        caller = current_caller()
        review = _editable_review(caller, review_id)
        db.session.delete(review)
        db.session.commit()

        AuditLogger.log_action(
            user_id=caller.user_id,
            action='review_deleted',
            entity_type='review',
            entity_id=review_id,
            description='Review deleted'
        )

        return APIResponse.success(message='Review deleted')

    except ApplicationError as e:
        db.session.rollback()
        return APIResponse.from_exception(e)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Delete review error: {str(e)}")
        return APIResponse.error("Failed to delete review", status_code=500)
